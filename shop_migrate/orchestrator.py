"""Migration orchestrator - coordinates single-kind and multi-kind migrations."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from .models.migration import (
    Connection,
    ConflictMode,
    DEFAULT_API_VERSION,
    EntityKind,
    METAFIELD_OWNER_KINDS,
    MigrationConfig,
    MigrationRequest,
    MigrationRequestError,
    MigrationRun,
    MigrationStatus,
    MigrationStep,
)
from .models.record import MigrationReport, MigrationSummary
from .loaders.base import BaseLoader
from .loaders.entity_loader import BlogLoader, EntityLoader
from .loaders.metafield_loader import MetafieldLoader
from .loaders.metaobject_loader import MetaobjectLoader
from .services.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)

# Order in which a multi-kind run visits entity kinds
RUN_ORDER = [
    EntityKind.PRODUCTS,
    EntityKind.COLLECTIONS,
    EntityKind.METAOBJECTS,
    EntityKind.BLOGS,
    EntityKind.PAGES,
]

ClientFactory = Callable[[Connection], Any]


class MigrationOrchestrator:
    """
    Orchestrates store-to-store migrations.

    ``migrate`` handles one MigrationRequest (one entity kind, one ID set) and
    returns its results and summary. ``run_migration`` executes a
    MigrationConfig: one ``migrate`` call per selected kind plus, when
    requested, one metafield pass per metafield-capable kind, summing the
    summaries.
    """

    def __init__(
        self,
        config: Optional[MigrationConfig] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Multi-kind migration configuration
            client_factory: Builds a transport for a connection (defaults to ShopifyClient)
        """
        self.config = config
        self.client_factory = client_factory or self._default_client_factory
        self.run: Optional[MigrationRun] = None

    def _default_client_factory(self, connection: Connection) -> ShopifyClient:
        if self.config:
            return ShopifyClient(connection, api_version=self.config.api_version, timeout=self.config.timeout)
        return ShopifyClient(connection, api_version=DEFAULT_API_VERSION)

    def migrate(self, request: MigrationRequest) -> MigrationReport:
        """
        Migrate one entity kind.

        Raises:
            MigrationRequestError: the request is malformed; nothing was fetched
            Exception: a top-level failure such as an unreadable source collection
        """
        request.validate()
        logger.info(
            f"Migrating {len(request.item_ids)} {request.entity_kind.value} "
            f"(conflict_mode={request.conflict_mode.value}, dry_run={request.dry_run})"
        )

        source_client = self.client_factory(request.source)
        target_client = self.client_factory(request.target)
        loader = self._create_loader(request, source_client, target_client)

        result = loader.load(request.item_ids)
        return result.to_report()

    def _create_loader(self, request: MigrationRequest, source_client, target_client) -> BaseLoader:
        """Create the loader for the request's entity kind."""
        options = {}
        if self.config:
            options["target_best_effort"] = self.config.target_best_effort

        kind = request.entity_kind
        if kind == EntityKind.METAOBJECTS:
            return MetaobjectLoader.from_request(request, source_client, target_client, **options)
        elif kind == EntityKind.METAFIELDS:
            return MetafieldLoader.from_request(
                request, source_client, target_client,
                owner_type=request.get_owner_kind().value, **options
            )
        elif kind == EntityKind.BLOGS:
            match_articles = self.config.match_articles if self.config else False
            return BlogLoader.from_request(
                request, source_client, target_client, match_articles=match_articles, **options
            )
        else:
            return EntityLoader.from_request(
                request, source_client, target_client, entity_kind=kind.value, **options
            )

    def run_migration(self) -> MigrationRun:
        """
        Run the configured multi-kind migration.

        A failing kind is recorded as a failed step whose requested items count
        as errors; the run continues with the next kind.

        Returns:
            MigrationRun with per-step results and the summed summary
        """
        if not self.config:
            raise RuntimeError("run_migration requires a MigrationConfig")

        config = self.config
        config.validate()

        self.run = MigrationRun(name=config.name, dry_run=config.dry_run)
        self.run.started_at = datetime.utcnow()
        self.run.status = MigrationStatus.RUNNING

        for kind in self._selected_kinds():
            item_ids = config.items[kind.value]
            self._run_step(f"Migrate {kind.value}", kind, item_ids)

            if config.migrate_metafields and kind in METAFIELD_OWNER_KINDS:
                self._run_step(f"Migrate metafields of {kind.value}", EntityKind.METAFIELDS, item_ids, kind)

        self.run.summary = sum((s.summary for s in self.run.steps), MigrationSummary())
        failed = [s for s in self.run.steps if s.status == MigrationStatus.FAILED]
        self.run.status = MigrationStatus.FAILED if failed and len(failed) == len(self.run.steps) else MigrationStatus.COMPLETED
        self.run.completed_at = datetime.utcnow()

        logger.info(f"=== MIGRATION {self.run.status.value.upper()}: {self.run.summary.to_dict()} ===")

        if config.save_report:
            self._save_report()

        return self.run

    def _selected_kinds(self) -> List[EntityKind]:
        selected = []
        for kind in RUN_ORDER:
            if self.config.items.get(kind.value):
                selected.append(kind)
        ignored = set(self.config.items) - {k.value for k in RUN_ORDER}
        for name in sorted(ignored):
            logger.warning(f"Ignoring '{name}' in items; metafields are migrated via migrate_metafields")
        return selected

    def _run_step(
        self,
        name: str,
        kind: EntityKind,
        item_ids: Iterable[str],
        owner_kind: Optional[EntityKind] = None
    ) -> MigrationStep:
        config = self.config
        item_ids = list(item_ids)
        step = self.run.add_step(name=name, entity_kind=kind.value)
        step.status = MigrationStatus.RUNNING
        step.started_at = datetime.utcnow()
        logger.info(f"Starting: {name}")

        request = MigrationRequest(
            source=config.source,
            target=config.target,
            entity_kind=kind,
            item_ids=item_ids,
            conflict_mode=config.conflict_mode,
            dry_run=config.dry_run,
            owner_type_hint=owner_kind.value if owner_kind else None,
        )

        try:
            report = self.migrate(request)
            step.results = report.results
            step.summary = report.summary
            step.status = MigrationStatus.COMPLETED
            logger.info(
                f"Completed {name}: {report.summary.created} created, {report.summary.updated} updated, "
                f"{report.summary.skipped} skipped, {report.summary.errors} errors"
            )

        except Exception as e:
            step.status = MigrationStatus.FAILED
            step.error = str(e)
            step.summary = MigrationSummary(total=len(item_ids), errors=len(item_ids))
            self.run.errors.append({
                "step": name,
                "error": str(e),
                "timestamp": datetime.utcnow().isoformat(),
            })
            logger.error(f"{name} failed: {e}")

        finally:
            step.completed_at = datetime.utcnow()

        return step

    def _save_report(self) -> Path:
        """Save the migration report."""
        logs_dir = Path(self.config.output_dir) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        filepath = logs_dir / f"migration_report_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filepath, 'w') as f:
            json.dump(self.run.to_dict(), f, indent=2, default=str)
        logger.info(f"Saved migration report to {filepath}")
        return filepath


def migrate(
    source: Connection,
    target: Connection,
    entity_kind,
    item_ids: Iterable[str],
    conflict_mode=ConflictMode.SKIP,
    dry_run: bool = False,
    owner_type_hint: Optional[str] = None,
    client_factory: Optional[ClientFactory] = None
) -> MigrationReport:
    """Migrate one entity kind from ``source`` to ``target``."""
    try:
        kind = EntityKind(entity_kind)
        mode = ConflictMode(conflict_mode)
    except ValueError as e:
        raise MigrationRequestError(str(e))

    request = MigrationRequest(
        source=source,
        target=target,
        entity_kind=kind,
        item_ids=list(item_ids),
        conflict_mode=mode,
        dry_run=dry_run,
        owner_type_hint=owner_type_hint,
    )
    return MigrationOrchestrator(client_factory=client_factory).migrate(request)
