"""Pydantic models for API requests and responses."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class EntityKindEnum(str, Enum):
    PRODUCTS = "products"
    COLLECTIONS = "collections"
    PAGES = "pages"
    BLOGS = "blogs"
    METAOBJECTS = "metaobjects"
    METAFIELDS = "metafields"


class ConflictModeEnum(str, Enum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    ASK = "ask"


class ResultStatusEnum(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


# Request Models
class ConnectionModel(BaseModel):
    url: str
    token: str


class MigrateRequestModel(BaseModel):
    source: ConnectionModel
    target: ConnectionModel
    entity_kind: EntityKindEnum
    item_ids: List[str] = Field(default_factory=list)
    conflict_mode: ConflictModeEnum = ConflictModeEnum.SKIP
    dry_run: bool = False
    owner_type_hint: Optional[str] = None


class MigrationPlanModel(BaseModel):
    name: str = ""
    source: ConnectionModel
    target: ConnectionModel
    items: Dict[str, List[str]] = Field(default_factory=dict)
    conflict_mode: ConflictModeEnum = ConflictModeEnum.SKIP
    dry_run: bool = False
    migrate_metafields: bool = False
    match_articles: bool = False


# Response Models
class ResultModel(BaseModel):
    id: str
    title: str
    status: ResultStatusEnum
    message: Optional[str] = None


class SummaryModel(BaseModel):
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


class MigrateResponse(BaseModel):
    results: List[ResultModel]
    summary: SummaryModel


class ErrorResponse(BaseModel):
    error: str
