"""GraphQL extractor for metaobject definitions and entries."""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseExtractor

logger = logging.getLogger(__name__)

PAGE_SIZE = 50

DEFINITIONS_QUERY = """
query MetaobjectDefinitions($first: Int!, $after: String) {
  metaobjectDefinitions(first: $first, after: $after) {
    edges {
      node {
        id
        name
        type
        fieldDefinitions {
          key
          name
          type { name }
          required
          description
          validations { name value }
        }
      }
      cursor
    }
    pageInfo { hasNextPage }
  }
}
"""

ENTRIES_QUERY = """
query Metaobjects($type: String!, $first: Int!, $after: String) {
  metaobjects(type: $type, first: $first, after: $after) {
    edges {
      node {
        id
        handle
        type
        fields { key value type }
      }
      cursor
    }
    pageInfo { hasNextPage }
  }
}
"""


class GraphQLExtractor(BaseExtractor):
    """
    Extractor for cursor-paginated GraphQL connections.

    Every page is accumulated before returning, so matching always runs
    against the complete collection.
    """

    def __init__(self, client, best_effort: bool = False, page_size: int = PAGE_SIZE):
        super().__init__(client, best_effort)
        self.page_size = page_size

    def _fetch(self, kind: str, **kwargs) -> List[Dict[str, Any]]:
        if kind == "metaobject_definitions":
            return self._paginate(DEFINITIONS_QUERY, "metaobjectDefinitions", {})
        if kind == "metaobjects":
            return self._paginate(ENTRIES_QUERY, "metaobjects", {"type": kwargs["type"]})
        raise ValueError(f"Unsupported GraphQL entity kind: {kind}")

    def _paginate(self, query: str, connection: str, variables: Dict[str, Any]) -> List[Dict[str, Any]]:
        nodes: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        has_next = True

        while has_next:
            page_vars = dict(variables, first=self.page_size, after=cursor)
            data = self.client.graphql(query, page_vars)
            conn = (data.get("data") or {}).get(connection) or {}
            edges = conn.get("edges") or []

            nodes.extend(edge["node"] for edge in edges)
            has_next = bool((conn.get("pageInfo") or {}).get("hasNextPage")) and bool(edges)
            cursor = edges[-1].get("cursor") if edges else None

        return nodes

    def fetch_definitions(self) -> List[Dict[str, Any]]:
        return self.fetch("metaobject_definitions")

    def fetch_entries(self, type_: str) -> List[Dict[str, Any]]:
        return self.fetch("metaobjects", type=type_)
