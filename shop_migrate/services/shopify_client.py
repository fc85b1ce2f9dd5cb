"""Thin requests-based client for the Shopify Admin REST and GraphQL APIs."""

import json
import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models.migration import Connection, DEFAULT_API_VERSION

logger = logging.getLogger(__name__)


class ShopifyAPIError(Exception):
    """Transport failure: non-2xx response, network error or GraphQL ``errors``."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def clean_shop_url(shop_url: str) -> str:
    """Strip scheme and trailing slash from a shop URL."""
    url = shop_url.strip()
    for prefix in ("https://", "http://"):
        if url.startswith(prefix):
            url = url[len(prefix):]
    return url.rstrip("/")


class ShopifyClient:
    """
    Client for one store.

    Endpoints are passed relative to the store, e.g.
    ``/admin/api/2024-01/products.json``; use ``rest_path`` to build them.
    """

    def __init__(
        self,
        connection: Connection,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        max_retries: int = 3,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            connection: Store URL and access token
            api_version: Admin API version
            timeout: Request timeout in seconds
            max_retries: Retries for throttled (429) reads
            session: Custom requests session
        """
        self.connection = connection
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = f"https://{clean_shop_url(connection.url)}"
        self._session = session or self._create_session(max_retries)
        self._session.headers["X-Shopify-Access-Token"] = connection.token
        self._session.headers["Content-Type"] = "application/json"

    def _create_session(self, max_retries: int) -> requests.Session:
        """Create a requests session that retries throttled reads."""
        session = requests.Session()

        # Writes are never retried, so a lost response cannot duplicate a record
        retries = Retry(
            total=max_retries,
            backoff_factor=1.0,
            status_forcelist=[429],
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        return session

    def rest_path(self, resource: str) -> str:
        """Build a REST endpoint path, e.g. ``rest_path("products.json")``."""
        return f"/admin/api/{self.api_version}/{resource.lstrip('/')}"

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{self.base_url}{endpoint}"

    def _request(self, method: str, endpoint: str, body: Any = None) -> requests.Response:
        url = self._url(endpoint)
        logger.debug(f"{method} {url}")
        try:
            response = self._session.request(method, url, json=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ShopifyAPIError(f"{method} {endpoint} failed: {e}") from e

        if not response.ok:
            raise ShopifyAPIError(
                f"{method} {endpoint} failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ShopifyAPIError(
                f"Invalid JSON response ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def get(self, endpoint: str) -> Dict[str, Any]:
        return self._json(self._request("GET", endpoint))

    def get_all(self, endpoint: str, root_key: str) -> List[Dict[str, Any]]:
        """GET a REST collection, following ``Link: rel="next"`` pages."""
        items: List[Dict[str, Any]] = []
        next_endpoint: Optional[str] = endpoint

        while next_endpoint:
            response = self._request("GET", next_endpoint)
            items.extend(self._json(response).get(root_key) or [])
            next_endpoint = response.links.get("next", {}).get("url")

        return items

    def post(self, endpoint: str, body: Any) -> Dict[str, Any]:
        return self._json(self._request("POST", endpoint, body))

    def put(self, endpoint: str, body: Any) -> Dict[str, Any]:
        return self._json(self._request("PUT", endpoint, body))

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a GraphQL query or mutation.

        Top-level ``errors`` raise ShopifyAPIError. Mutation ``userErrors`` are
        returned as part of the data and must be checked by the caller.
        """
        data = self.post(self.rest_path("graphql.json"), {"query": query, "variables": variables or {}})
        if data.get("errors"):
            raise ShopifyAPIError(f"GraphQL error: {json.dumps(data['errors'])}", body=data["errors"])
        return data
