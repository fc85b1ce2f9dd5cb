"""Migration execution endpoints."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ..models import (
    ErrorResponse,
    MigrateRequestModel,
    MigrateResponse,
    MigrationPlanModel,
)
from ...models.migration import (
    Connection,
    ConflictMode,
    EntityKind,
    MigrationConfig,
    MigrationRequest,
    MigrationRequestError,
)
from ...orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def get_orchestrator(config: MigrationConfig = None) -> MigrationOrchestrator:
    """Build the orchestrator used by the endpoints; replaced in tests."""
    return MigrationOrchestrator(config)


def _connection(model) -> Connection:
    return Connection(url=model.url, token=model.token)


@router.post(
    "",
    response_model=MigrateResponse,
    responses={400: {"description": "Malformed request"}, 500: {"model": ErrorResponse}},
)
def migrate(data: MigrateRequestModel):
    """Migrate one entity kind and return per-item results with a summary."""
    request = MigrationRequest(
        source=_connection(data.source),
        target=_connection(data.target),
        entity_kind=EntityKind(data.entity_kind.value),
        item_ids=data.item_ids,
        conflict_mode=ConflictMode(data.conflict_mode.value),
        dry_run=data.dry_run,
        owner_type_hint=data.owner_type_hint,
    )

    try:
        report = get_orchestrator().migrate(request)
    except MigrationRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Migration of {request.entity_kind.value} failed: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return report.to_dict()


@router.post("/runs", responses={400: {"description": "Malformed plan"}})
def run_plan(data: MigrationPlanModel) -> Dict[str, Any]:
    """Run a multi-kind migration plan and return the run record."""
    try:
        config = MigrationConfig.from_dict({
            "name": data.name,
            "source": {"url": data.source.url, "token": data.source.token},
            "target": {"url": data.target.url, "token": data.target.token},
            "items": data.items,
            "conflict_mode": data.conflict_mode.value,
            "dry_run": data.dry_run,
            "migrate_metafields": data.migrate_metafields,
            "match_articles": data.match_articles,
        })
    except MigrationRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    run = get_orchestrator(config).run_migration()
    return run.to_dict()
