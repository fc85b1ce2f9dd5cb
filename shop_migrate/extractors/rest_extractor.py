"""REST extractor for products, collections, pages and blogs."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .base import BaseExtractor
from ..services.cleaner import COLLECTION_TYPE_FIELD

logger = logging.getLogger(__name__)

PAGE_LIMIT = 250

# Collections span two REST resources
COLLECTION_RESOURCES = {
    "custom": "custom_collections",
    "smart": "smart_collections",
}

# Entity kind -> REST resources listing its items
KIND_RESOURCES = {
    "products": ["products"],
    "collections": list(COLLECTION_RESOURCES.values()),
    "pages": ["pages"],
    "blogs": ["blogs"],
}

# REST resource -> root key of a single-resource response
SINGULAR_KEYS = {
    "products": "product",
    "collections": "collection",
    "custom_collections": "custom_collection",
    "smart_collections": "smart_collection",
    "pages": "page",
    "blogs": "blog",
    "articles": "article",
}


class RestExtractor(BaseExtractor):
    """
    Extractor for REST-listed store data.

    Supports:
    - products, pages
    - collections (custom and smart, fetched concurrently and tagged)
    - blogs, each with its articles
    """

    def _list(self, resource: str) -> List[Dict[str, Any]]:
        return self.client.get_all(
            self.client.rest_path(f"{resource}.json?limit={PAGE_LIMIT}"), resource
        )

    def _fetch(self, kind: str, **kwargs) -> List[Dict[str, Any]]:
        if kind == "collections":
            return self._fetch_collections()
        if kind == "blogs":
            return self._fetch_blogs(with_articles=kwargs.get("with_articles", True))
        if kind in ("products", "pages"):
            return self._list(kind)
        raise ValueError(f"Unsupported REST entity kind: {kind}")

    def _fetch_collection_type(self, collection_type: str) -> List[Dict[str, Any]]:
        resource = COLLECTION_RESOURCES[collection_type]
        try:
            items = self._list(resource)
        except Exception as e:
            # One missing scope must not hide the other collection type
            logger.warning(f"Fetching {resource} failed: {e}")
            return []
        return [dict(item, **{COLLECTION_TYPE_FIELD: collection_type}) for item in items]

    def _fetch_collections(self) -> List[Dict[str, Any]]:
        """Fetch custom and smart collections concurrently; both are read-only."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            custom = pool.submit(self._fetch_collection_type, "custom")
            smart = pool.submit(self._fetch_collection_type, "smart")
            return custom.result() + smart.result()

    def _fetch_blogs(self, with_articles: bool = True) -> List[Dict[str, Any]]:
        blogs = self._list("blogs")
        if not with_articles:
            return blogs
        return [dict(blog, articles=self.fetch_articles(blog["id"])) for blog in blogs]

    def fetch_articles(self, blog_id: Any) -> List[Dict[str, Any]]:
        return self.client.get_all(
            self.client.rest_path(f"blogs/{blog_id}/articles.json?limit={PAGE_LIMIT}"), "articles"
        )

    def fetch_one(self, resource: str, item_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a single item by ID, e.g. ``fetch_one("products", "123")``."""
        data = self.client.get(self.client.rest_path(f"{resource}/{item_id}.json"))
        key = SINGULAR_KEYS.get(resource)
        if key and key in data:
            return data[key]
        # Fall back to the only root key of the response
        return next(iter(data.values()), None) if data else None

    def fetch_by_handle(self, resource: str, handle: str) -> List[Dict[str, Any]]:
        """List items of ``resource`` filtered server-side by handle."""
        data = self.client.get(self.client.rest_path(f"{resource}.json?handle={quote(handle)}&limit=1"))
        return data.get(resource) or []
