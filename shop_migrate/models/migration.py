"""Migration request and execution models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import os
import uuid

from .record import MigrationResult, MigrationSummary

DEFAULT_API_VERSION = "2024-01"


class MigrationRequestError(ValueError):
    """Raised when a migration request is malformed."""


ASK_UNRESOLVED = "conflict mode 'ask' must be resolved to 'overwrite' or 'skip' per item before migrating"


class EntityKind(str, Enum):
    """Kinds of store data that can be migrated."""
    PRODUCTS = "products"
    COLLECTIONS = "collections"
    PAGES = "pages"
    BLOGS = "blogs"
    METAOBJECTS = "metaobjects"
    METAFIELDS = "metafields"


# Kinds whose items carry metafields
METAFIELD_OWNER_KINDS = (
    EntityKind.PRODUCTS,
    EntityKind.COLLECTIONS,
    EntityKind.PAGES,
    EntityKind.BLOGS,
)


class ConflictMode(str, Enum):
    """What to do when an item already exists on the target."""
    OVERWRITE = "overwrite"
    SKIP = "skip"
    ASK = "ask"  # Must be resolved per item by the caller


class MigrationStatus(str, Enum):
    """Status of a migration run or step."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Connection:
    """Store identity handed to the transport."""
    url: str
    token: str

    def to_dict(self) -> Dict[str, Any]:
        # Never serialize the token
        return {"url": self.url}


@dataclass
class MigrationRequest:
    """One entity kind and one set of source item IDs to migrate."""
    source: Connection
    target: Connection
    entity_kind: EntityKind
    item_ids: List[str] = field(default_factory=list)
    conflict_mode: ConflictMode = ConflictMode.SKIP
    dry_run: bool = False
    owner_type_hint: Optional[str] = None

    def __post_init__(self):
        self.item_ids = [str(i) for i in self.item_ids]

    def get_owner_kind(self) -> EntityKind:
        """Owner kind for a metafield migration (defaults to products)."""
        hint = self.owner_type_hint or EntityKind.PRODUCTS.value
        try:
            kind = EntityKind(hint)
        except ValueError:
            raise MigrationRequestError(f"Unknown metafield owner type: {hint}")
        if kind not in METAFIELD_OWNER_KINDS:
            raise MigrationRequestError(f"Unknown metafield owner type: {hint}")
        return kind

    def validate(self) -> None:
        """Raise MigrationRequestError if the request cannot be executed."""
        for label, conn in (("source", self.source), ("target", self.target)):
            if not conn or not conn.url or not conn.token:
                raise MigrationRequestError(f"{label} connection requires url and token")

        if not isinstance(self.entity_kind, EntityKind):
            raise MigrationRequestError(f"Unknown entity kind: {self.entity_kind}")

        if self.conflict_mode == ConflictMode.ASK:
            raise MigrationRequestError(ASK_UNRESOLVED)

        if self.entity_kind == EntityKind.METAFIELDS:
            self.get_owner_kind()


@dataclass
class MigrationStep:
    """A single engine call within a migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    entity_kind: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    results: List[MigrationResult] = field(default_factory=list)
    summary: MigrationSummary = field(default_factory=MigrationSummary)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "entity_kind": self.entity_kind,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
            "error": self.error,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationRun:
    """A complete multi-kind migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    dry_run: bool = False

    # Timing
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    steps: List[MigrationStep] = field(default_factory=list)
    summary: MigrationSummary = field(default_factory=MigrationSummary)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "dry_run": self.dry_run,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "steps": [s.to_dict() for s in self.steps],
            "summary": self.summary.to_dict(),
            "errors": self.errors,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_step(self, name: str, entity_kind: str) -> MigrationStep:
        """Add a new step to the run."""
        step = MigrationStep(name=name, entity_kind=entity_kind)
        self.steps.append(step)
        return step


@dataclass
class MigrationConfig:
    """Configuration for a multi-kind migration."""
    source: Connection
    target: Connection
    name: str = ""

    # Entity kind -> selected source item IDs
    items: Dict[str, List[str]] = field(default_factory=dict)

    # Execution options
    conflict_mode: ConflictMode = ConflictMode.SKIP
    dry_run: bool = False
    migrate_metafields: bool = False
    match_articles: bool = False
    target_best_effort: bool = True
    api_version: str = field(
        default_factory=lambda: os.environ.get("SHOPIFY_API_VERSION", DEFAULT_API_VERSION)
    )
    timeout: float = 30.0

    # Output
    output_dir: str = "./data"
    save_report: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "items": self.items,
            "conflict_mode": self.conflict_mode.value,
            "dry_run": self.dry_run,
            "migrate_metafields": self.migrate_metafields,
            "match_articles": self.match_articles,
            "target_best_effort": self.target_best_effort,
            "api_version": self.api_version,
            "timeout": self.timeout,
            "output_dir": self.output_dir,
            "save_report": self.save_report,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation.

        Tokens missing from the file are read from SHOPIFY_SOURCE_TOKEN and
        SHOPIFY_TARGET_TOKEN.
        """
        source_data = data.get("source", {})
        target_data = data.get("target", {})

        items = {}
        for kind, ids in data.get("items", {}).items():
            try:
                EntityKind(kind)
            except ValueError:
                raise MigrationRequestError(f"Unknown entity kind in config: {kind}")
            items[kind] = [str(i) for i in ids]

        try:
            conflict_mode = ConflictMode(data.get("conflict_mode", "skip"))
        except ValueError as e:
            raise MigrationRequestError(str(e))

        config = cls(
            name=data.get("name", ""),
            source=Connection(
                url=source_data.get("url", ""),
                token=source_data.get("token") or os.environ.get("SHOPIFY_SOURCE_TOKEN", ""),
            ),
            target=Connection(
                url=target_data.get("url", ""),
                token=target_data.get("token") or os.environ.get("SHOPIFY_TARGET_TOKEN", ""),
            ),
            items=items,
            conflict_mode=conflict_mode,
            dry_run=data.get("dry_run", False),
            migrate_metafields=data.get("migrate_metafields", False),
            match_articles=data.get("match_articles", False),
            target_best_effort=data.get("target_best_effort", True),
            api_version=data.get("api_version")
            or os.environ.get("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
            timeout=data.get("timeout", 30.0),
            output_dir=data.get("output_dir", "./data"),
            save_report=data.get("save_report", False),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise MigrationRequestError if the plan cannot be executed."""
        if ConflictMode(self.conflict_mode) == ConflictMode.ASK:
            raise MigrationRequestError(ASK_UNRESOLVED)
