"""Base extractor interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """
    Base class for store data extractors.

    Extractors pull complete collections from one store. With ``best_effort``
    set, a failed fetch is logged and yields an empty collection instead of
    raising. This is the degrade-not-abort policy used for target-side
    listings: the migration continues, at the risk of treating existing items
    as new.
    """

    def __init__(self, client, best_effort: bool = False):
        """
        Initialize the extractor.

        Args:
            client: Transport exposing get/get_all/post/put/graphql
            best_effort: Return an empty collection when a fetch fails
        """
        self.client = client
        self.best_effort = best_effort

    @abstractmethod
    def _fetch(self, kind: str, **kwargs) -> List[Dict[str, Any]]:
        """Fetch the complete collection for ``kind``."""
        pass

    def fetch(self, kind: str, **kwargs) -> List[Dict[str, Any]]:
        """
        Fetch the complete collection for an entity kind.

        Returns:
            List of raw records as returned by the store
        """
        try:
            items = self._fetch(kind, **kwargs)
        except Exception as e:
            if not self.best_effort:
                raise
            logger.warning(f"Fetching {kind} failed, continuing with an empty collection: {e}")
            return []

        logger.debug(f"Fetched {len(items)} {kind}")
        return items

    @staticmethod
    def select(items: List[Dict[str, Any]], item_ids: List[str], id_field: str = "id") -> List[Dict[str, Any]]:
        """Filter fetched items to the requested source IDs, keeping fetch order."""
        wanted = set(str(i) for i in item_ids)
        return [item for item in items if str(item.get(id_field)) in wanted]

    @staticmethod
    def title_of(item: Dict[str, Any], default: Optional[str] = None) -> str:
        return item.get("title") or item.get("name") or item.get("handle") or default or str(item.get("id"))
