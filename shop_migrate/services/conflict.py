"""Conflict policy: decide what happens to each source item."""

from enum import Enum

from ..models.migration import ConflictMode
from ..models.record import ResultStatus


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    SIMULATE = "simulate"


ALREADY_EXISTS = "already exists"
DRY_RUN = "dry run"


class ConflictResolver:
    """
    Maps (existing?, conflict mode, dry run) to an action.

    ``ask`` is an interactive, per-item decision; callers must resolve it to
    ``overwrite`` or ``skip`` before reaching the resolver.
    """

    def __init__(self, conflict_mode: ConflictMode, dry_run: bool = False):
        conflict_mode = ConflictMode(conflict_mode)
        if conflict_mode == ConflictMode.ASK:
            raise ValueError("ConflictResolver requires 'overwrite' or 'skip'")
        self.conflict_mode = conflict_mode
        self.dry_run = dry_run

    def resolve(self, existing: bool) -> Action:
        if self.dry_run:
            return Action.SIMULATE
        if not existing:
            return Action.CREATE
        if self.conflict_mode == ConflictMode.SKIP:
            return Action.SKIP
        return Action.UPDATE

    @staticmethod
    def predict(existing: bool) -> ResultStatus:
        """Simulated outcome for a dry run; never ``skipped``."""
        return ResultStatus.UPDATED if existing else ResultStatus.CREATED
