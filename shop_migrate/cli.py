"""Command line interface for the shop migration tool."""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .models.migration import (
    Connection,
    ConflictMode,
    EntityKind,
    MigrationConfig,
    MigrationRequest,
    MigrationRequestError,
)
from .orchestrator import ClientFactory, MigrationOrchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Shop Migrate - Copy store data from one Shopify store to another"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Single-kind migration
    migrate_parser = subparsers.add_parser("migrate", help="Migrate one entity kind")
    migrate_parser.add_argument(
        "--kind", required=True, choices=[k.value for k in EntityKind], help="Entity kind to migrate"
    )
    migrate_parser.add_argument("--ids", required=True, help="Comma-separated source item IDs")
    migrate_parser.add_argument("--source-url", required=True, help="Source shop URL")
    migrate_parser.add_argument("--target-url", required=True, help="Target shop URL")
    migrate_parser.add_argument("--source-token", help="Source access token (default: $SHOPIFY_SOURCE_TOKEN)")
    migrate_parser.add_argument("--target-token", help="Target access token (default: $SHOPIFY_TARGET_TOKEN)")
    migrate_parser.add_argument(
        "--conflict-mode",
        default=ConflictMode.SKIP.value,
        choices=[ConflictMode.OVERWRITE.value, ConflictMode.SKIP.value],
        help="What to do with items that already exist on the target",
    )
    migrate_parser.add_argument("--owner-type", help="Owner kind for metafields (default: products)")
    migrate_parser.add_argument("--dry-run", action="store_true", help="Simulate without changes")
    migrate_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Multi-kind run
    run_parser = subparsers.add_parser("run", help="Run a migration plan")
    run_parser.add_argument("--config", required=True, help="Path to migration plan JSON file")
    run_parser.add_argument("--dry-run", action="store_true", help="Simulate without changes")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        if args.command == "migrate":
            return run_single(args)
        elif args.command == "run":
            return run_plan(args)
        else:
            parser.print_help()
            return 1
    except MigrationRequestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


def run_single(args, client_factory: Optional[ClientFactory] = None) -> int:
    """Migrate one entity kind and print the report as JSON."""
    request = MigrationRequest(
        source=Connection(
            url=args.source_url,
            token=args.source_token or os.environ.get("SHOPIFY_SOURCE_TOKEN", ""),
        ),
        target=Connection(
            url=args.target_url,
            token=args.target_token or os.environ.get("SHOPIFY_TARGET_TOKEN", ""),
        ),
        entity_kind=EntityKind(args.kind),
        item_ids=[i.strip() for i in args.ids.split(",") if i.strip()],
        conflict_mode=ConflictMode(args.conflict_mode),
        dry_run=args.dry_run,
        owner_type_hint=args.owner_type,
    )

    try:
        report = MigrationOrchestrator(client_factory=client_factory).migrate(request)
    except MigrationRequestError:
        raise
    except Exception as e:
        print(json.dumps({"error": str(e)}, indent=2))
        return 1

    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.summary.errors else 0


def run_plan(args, client_factory: Optional[ClientFactory] = None) -> int:
    """Run a migration plan from a config file."""
    with open(args.config) as f:
        config_data = json.load(f)

    config = MigrationConfig.from_dict(config_data)

    if args.dry_run:
        config.dry_run = True

    result = MigrationOrchestrator(config, client_factory=client_factory).run_migration()

    print("\n" + "=" * 60)
    print("DRY RUN COMPLETE" if config.dry_run else "MIGRATION COMPLETE")
    print("=" * 60)
    print(f"Status: {result.status.value}")
    for step in result.steps:
        print(
            f"  {step.name}: {step.summary.created} created, {step.summary.updated} updated, "
            f"{step.summary.skipped} skipped, {step.summary.errors} errors ({step.duration_seconds or 0:.2f}s)"
        )
    print(f"Total: {result.summary.total}")
    print(f"Created: {result.summary.created}")
    print(f"Updated: {result.summary.updated}")
    print(f"Skipped: {result.summary.skipped}")
    print(f"Errors: {result.summary.errors}")
    if result.duration_seconds:
        print(f"Duration: {result.duration_seconds:.2f} seconds")

    return 1 if result.summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
