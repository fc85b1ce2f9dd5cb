"""Base loader interface for writing to the target store."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

from ..models.migration import ConflictMode, MigrationRequest
from ..models.record import MigrationReport, MigrationResult, MigrationSummary, ResultStatus
from ..services.conflict import ALREADY_EXISTS, DRY_RUN, Action, ConflictResolver

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Accumulates per-item results of one loader call."""
    entity: str
    results: List[MigrationResult] = field(default_factory=list)

    def add(
        self,
        item_id: Any,
        title: str,
        status: ResultStatus,
        message: Optional[str] = None
    ) -> MigrationResult:
        result = MigrationResult(id=str(item_id), title=title, status=status, message=message)
        self.results.append(result)
        return result

    def error(self, item_id: Any, title: str, message: str) -> MigrationResult:
        logger.error(f"{self.entity} {title} ({item_id}): {message}")
        return self.add(item_id, title, ResultStatus.ERROR, message)

    @property
    def summary(self) -> MigrationSummary:
        return MigrationSummary.from_results(self.results)

    def to_report(self) -> MigrationReport:
        return MigrationReport.from_results(self.results)


def user_errors_message(data: Dict[str, Any], mutation: str) -> Optional[str]:
    """Joined ``userErrors`` messages of a mutation payload, or None when clean."""
    payload = (data.get("data") or {}).get(mutation) or {}
    errors = payload.get("userErrors") or []
    if not errors:
        return None
    return ", ".join(e.get("message", str(e)) for e in errors)


class BaseLoader(ABC):
    """
    Base class for data loaders.

    A loader reconciles one entity kind: it reads source and target, decides
    per item with the ConflictResolver and writes to the target. Items are
    processed strictly in sequence and a failing item is recorded as an error
    without stopping the batch.
    """

    def __init__(
        self,
        source_client,
        target_client,
        conflict_mode: ConflictMode = ConflictMode.SKIP,
        dry_run: bool = False,
        target_best_effort: bool = True
    ):
        """
        Initialize the loader.

        Args:
            source_client: Transport for the source store
            target_client: Transport for the target store
            conflict_mode: Policy for items that already exist on the target
            dry_run: If True, predict outcomes without writing
            target_best_effort: Treat a failed target listing as empty
        """
        self.source_client = source_client
        self.target_client = target_client
        self.conflict_mode = conflict_mode
        self.dry_run = dry_run
        self.target_best_effort = target_best_effort
        self.resolver = ConflictResolver(conflict_mode, dry_run)

    @classmethod
    def from_request(cls, request: MigrationRequest, source_client, target_client, **kwargs) -> "BaseLoader":
        return cls(
            source_client,
            target_client,
            conflict_mode=request.conflict_mode,
            dry_run=request.dry_run,
            **kwargs,
        )

    @abstractmethod
    def load(self, item_ids: List[str]) -> LoadResult:
        """
        Migrate the given source items.

        Args:
            item_ids: Source-side IDs

        Returns:
            LoadResult with one or more results per item
        """
        pass

    def apply(
        self,
        result: LoadResult,
        item_id: Any,
        title: str,
        existing: Optional[Dict[str, Any]],
        create: Callable[[], Optional[str]],
        update: Callable[[Dict[str, Any]], Optional[str]]
    ) -> Optional[MigrationResult]:
        """
        Resolve and execute the action for one item.

        ``create`` and ``update`` perform the write and return an error message
        for soft failures (such as GraphQL userErrors) or None on success.
        Exceptions are recorded as error results.
        """
        action = self.resolver.resolve(existing is not None)

        if action == Action.SIMULATE:
            return result.add(item_id, title, self.resolver.predict(existing is not None), DRY_RUN)

        if action == Action.SKIP:
            return result.add(item_id, title, ResultStatus.SKIPPED, ALREADY_EXISTS)

        try:
            if action == Action.UPDATE:
                failure = update(existing)
                status = ResultStatus.UPDATED
            else:
                failure = create()
                status = ResultStatus.CREATED
        except Exception as e:
            return result.error(item_id, title, str(e))

        if failure:
            return result.error(item_id, title, failure)
        return result.add(item_id, title, status)
