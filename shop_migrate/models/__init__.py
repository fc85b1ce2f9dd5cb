"""Data models for the migration application."""

from .migration import (
    Connection,
    ConflictMode,
    EntityKind,
    METAFIELD_OWNER_KINDS,
    MigrationConfig,
    MigrationRequest,
    MigrationRequestError,
    MigrationRun,
    MigrationStatus,
    MigrationStep,
)
from .record import (
    FieldDefinition,
    MetaobjectDefinition,
    MetaobjectEntry,
    MetaobjectField,
    MigrationReport,
    MigrationResult,
    MigrationSummary,
    ResultStatus,
)

__all__ = [
    "Connection",
    "ConflictMode",
    "EntityKind",
    "METAFIELD_OWNER_KINDS",
    "MigrationConfig",
    "MigrationRequest",
    "MigrationRequestError",
    "MigrationRun",
    "MigrationStatus",
    "MigrationStep",
    "FieldDefinition",
    "MetaobjectDefinition",
    "MetaobjectEntry",
    "MetaobjectField",
    "MigrationReport",
    "MigrationResult",
    "MigrationSummary",
    "ResultStatus",
]
