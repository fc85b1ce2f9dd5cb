"""Loader for metafields attached to products, collections, pages and blogs."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import BaseLoader, LoadResult
from ..extractors.rest_extractor import RestExtractor, KIND_RESOURCES
from ..models.record import ResultStatus
from ..services.conflict import Action
from ..services.matcher import handle_matcher, metafield_matcher

logger = logging.getLogger(__name__)

NO_METAFIELDS = "no metafields"
NO_HANDLE = "no handle found"
TARGET_NOT_FOUND = "target resource not found"


@dataclass
class MetafieldTally:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def message(self) -> str:
        return f"{self.created} created, {self.updated} updated, {self.skipped} skipped, {self.errors} errors"


class MetafieldLoader(BaseLoader):
    """
    Copies the metafields of selected owners to their target counterparts.

    The target owner is resolved by handle before any metafield is written,
    so metafields are never created as orphans. Each owner yields one
    aggregated result whose status is ``error`` if any field failed and
    ``created`` otherwise, even when every field was an update.
    """

    entity_kind = "metafields"

    def __init__(self, source_client, target_client, owner_type: str = "products", **kwargs):
        super().__init__(source_client, target_client, **kwargs)
        if owner_type not in KIND_RESOURCES:
            raise ValueError(f"Unknown metafield owner type: {owner_type}")
        self.owner_type = owner_type
        self.source_extractor = RestExtractor(source_client)
        self.target_extractor = RestExtractor(target_client)

    def load(self, item_ids: List[str]) -> LoadResult:
        result = LoadResult(entity=self.entity_kind)
        logger.info(f"Migrating metafields of {len(item_ids)} {self.owner_type} (dry_run={self.dry_run})")

        for item_id in item_ids:
            try:
                self._load_owner(result, str(item_id))
            except Exception as e:
                result.error(item_id, f"Metafields (#{item_id})", str(e))

        logger.info(f"Finished metafields of {self.owner_type}: {result.summary.to_dict()}")
        return result

    def _metafields_path(self, client, owner_id: Any, metafield_id: Any = None) -> str:
        if metafield_id is None:
            return client.rest_path(f"{self.owner_type}/{owner_id}/metafields.json")
        return client.rest_path(f"{self.owner_type}/{owner_id}/metafields/{metafield_id}.json")

    def _load_owner(self, result: LoadResult, item_id: str) -> None:
        metafields = self.source_client.get(self._metafields_path(self.source_client, item_id)).get("metafields") or []
        if not metafields:
            result.add(item_id, f"Metafields ({self.owner_type} #{item_id})", ResultStatus.SKIPPED, NO_METAFIELDS)
            return

        owner = self.source_extractor.fetch_one(self.owner_type, item_id) or {}
        handle = owner.get("handle")
        title = f"Metafields ({self.source_extractor.title_of(owner, default=item_id)})"
        if not handle:
            result.error(item_id, title, NO_HANDLE)
            return

        target_owner = self.resolve_target_owner(handle)
        if not target_owner:
            result.error(item_id, title, TARGET_NOT_FOUND)
            return

        existing = self._target_metafields(target_owner["id"])
        tally = MetafieldTally()
        for metafield in metafields:
            self._sync_metafield(tally, metafield, target_owner["id"], existing)

        status = ResultStatus.ERROR if tally.errors else ResultStatus.CREATED
        message = tally.message
        if self.dry_run:
            message = f"dry run: {message}"
        result.add(item_id, title, status, message)

    def resolve_target_owner(self, handle: str) -> Optional[Dict[str, Any]]:
        """
        Find the target item with ``handle``.

        Tries the handle-filtered listing first and falls back to scanning the
        full target collection when the filtered query fails.
        """
        try:
            for resource in KIND_RESOURCES[self.owner_type]:
                match = handle_matcher.match({"handle": handle}, self.target_extractor.fetch_by_handle(resource, handle))
                if match:
                    return match
            return None
        except Exception as e:
            logger.warning(f"Filtered {self.owner_type} lookup for {handle!r} failed, scanning all: {e}")

        return handle_matcher.match(
            {"handle": handle}, self.target_extractor.fetch(self.owner_type, with_articles=False)
        )

    def _target_metafields(self, owner_id: Any) -> List[Dict[str, Any]]:
        try:
            data = self.target_client.get(self._metafields_path(self.target_client, owner_id))
        except Exception as e:
            if not self.target_best_effort:
                raise
            logger.warning(f"Fetching target metafields of {self.owner_type} {owner_id} failed: {e}")
            return []
        return data.get("metafields") or []

    def _sync_metafield(
        self,
        tally: MetafieldTally,
        metafield: Dict[str, Any],
        owner_id: Any,
        existing: List[Dict[str, Any]]
    ) -> None:
        match = metafield_matcher.match(metafield, existing)
        action = self.resolver.resolve(match is not None)

        if action == Action.SIMULATE:
            if match is None:
                tally.created += 1
            else:
                tally.updated += 1
            return
        if action == Action.SKIP:
            tally.skipped += 1
            return

        try:
            if action == Action.UPDATE:
                self.target_client.put(
                    self._metafields_path(self.target_client, owner_id, match["id"]),
                    {"metafield": {"id": match["id"], "value": metafield.get("value"), "type": metafield.get("type")}},
                )
                tally.updated += 1
            else:
                self.target_client.post(
                    self._metafields_path(self.target_client, owner_id),
                    {"metafield": {
                        "namespace": metafield.get("namespace"),
                        "key": metafield.get("key"),
                        "value": metafield.get("value"),
                        "type": metafield.get("type"),
                    }},
                )
                tally.created += 1
        except Exception as e:
            logger.error(
                f"Metafield {metafield.get('namespace')}.{metafield.get('key')} "
                f"on {self.owner_type} {owner_id} failed: {e}"
            )
            tally.errors += 1
