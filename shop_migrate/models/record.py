"""Record models for migration data."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum


class ResultStatus(str, Enum):
    """Outcome of migrating a single item."""
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class MigrationResult:
    """Result of migrating one source item to the target store."""
    id: str  # Source-side ID
    title: str
    status: ResultStatus
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
        }
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass
class MigrationSummary:
    """Aggregate counts over a list of results."""
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0

    @classmethod
    def from_results(cls, results: List[MigrationResult]) -> "MigrationSummary":
        summary = cls(total=len(results))
        for result in results:
            if result.status == ResultStatus.CREATED:
                summary.created += 1
            elif result.status == ResultStatus.UPDATED:
                summary.updated += 1
            elif result.status == ResultStatus.SKIPPED:
                summary.skipped += 1
            elif result.status == ResultStatus.ERROR:
                summary.errors += 1
        return summary

    def __add__(self, other: "MigrationSummary") -> "MigrationSummary":
        return MigrationSummary(
            total=self.total + other.total,
            created=self.created + other.created,
            updated=self.updated + other.updated,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
        )

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary representation."""
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": self.errors,
        }


@dataclass
class MigrationReport:
    """Return value of a single-kind migration call."""
    results: List[MigrationResult] = field(default_factory=list)
    summary: MigrationSummary = field(default_factory=MigrationSummary)

    @classmethod
    def from_results(cls, results: List[MigrationResult]) -> "MigrationReport":
        return cls(results=list(results), summary=MigrationSummary.from_results(results))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
        }


@dataclass
class FieldDefinition:
    """A field of a metaobject definition."""
    key: str
    name: str
    value_type: str
    required: bool = False
    description: Optional[str] = None
    validations: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "FieldDefinition":
        type_info = node.get("type") or {}
        value_type = type_info.get("name") if isinstance(type_info, dict) else type_info
        return cls(
            key=node["key"],
            name=node.get("name") or node["key"],
            value_type=value_type or "",
            required=bool(node.get("required", False)),
            description=node.get("description") or None,
            validations=list(node.get("validations") or []),
        )

    def to_create_input(self) -> Dict[str, Any]:
        """Build the GraphQL field definition input for a create mutation."""
        data: Dict[str, Any] = {
            "key": self.key,
            "name": self.name,
            "type": self.value_type,
            "required": self.required,
        }
        if self.description:
            data["description"] = self.description
        if self.validations:
            data["validations"] = [
                {"name": v.get("name"), "value": v.get("value")} for v in self.validations
            ]
        return data


@dataclass
class MetaobjectDefinition:
    """A metaobject type schema. ``type`` is the cross-store natural key."""
    id: str
    name: str
    type: str
    field_definitions: List[FieldDefinition] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "MetaobjectDefinition":
        return cls(
            id=str(node["id"]),
            name=node.get("name") or node["type"],
            type=node["type"],
            field_definitions=[
                FieldDefinition.from_node(f) for f in node.get("fieldDefinitions") or []
            ],
        )


@dataclass
class MetaobjectField:
    key: str
    value: Optional[str]
    value_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.value is None or self.value == ""


@dataclass
class MetaobjectEntry:
    """An instance of a metaobject definition."""
    id: str
    handle: str
    type: str
    fields: List[MetaobjectField] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: Dict[str, Any], type_: Optional[str] = None) -> "MetaobjectEntry":
        return cls(
            id=str(node["id"]),
            handle=node.get("handle") or "",
            type=node.get("type") or type_ or "",
            fields=[
                MetaobjectField(key=f["key"], value=f.get("value"), value_type=f.get("type"))
                for f in node.get("fields") or []
            ],
        )

    @property
    def title(self) -> str:
        return self.handle or self.id

    def field_inputs(self) -> List[Dict[str, Any]]:
        """Fields for a create/update mutation, dropping empty values."""
        return [{"key": f.key, "value": f.value} for f in self.fields if not f.is_empty]
