"""Client for the public mdskills.ai marketplace API."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import DEFAULT_API_URL

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
SORT_CHOICES = ["popular", "trending", "recent"]


class MarketplaceError(Exception):
    """The marketplace API could not be reached or returned an error."""


class MarketplaceClient:
    """Read-only marketplace queries plus install tracking."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "MarketplaceClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            return self.client.get(f"{self.base_url}{path}", params=params)
        except httpx.TimeoutException as e:
            raise MarketplaceError("Request timed out. Check your connection and try again.") from e
        except httpx.ConnectError as e:
            raise MarketplaceError(f"Could not connect to {self.base_url}. Check your internet connection.") from e
        except httpx.HTTPError as e:
            raise MarketplaceError(f"Request failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.is_success:
            raise MarketplaceError(f"API error: {response.status_code} {response.reason_phrase}")
        try:
            return response.json()
        except ValueError as e:
            raise MarketplaceError("API returned invalid JSON") from e

    def fetch_skills(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        artifact_type: Optional[str] = None,
        sort: Optional[str] = None,
        limit: Optional[int] = DEFAULT_LIMIT,
        featured: bool = False,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if query:
            params["q"] = query
        if category:
            params["category"] = category
        if artifact_type:
            params["artifact_type"] = artifact_type
        if sort:
            params["sort"] = sort
        if limit:
            params["limit"] = str(limit)
        if featured:
            params["featured"] = "true"
        data = self._json(self._get("/api/skills", params))
        if not isinstance(data, dict):
            raise MarketplaceError("API returned an unexpected response")
        return list(data.get("skills") or [])

    def fetch_skill_detail(self, slug: str) -> Optional[Dict[str, Any]]:
        """Full listing with category, clients and permissions; None if unknown."""
        response = self._get(f"/api/skills/{quote(slug, safe='')}")
        if response.status_code == 404:
            return None
        data = self._json(response)
        return data.get("skill") if isinstance(data, dict) else None

    def fetch_categories(self) -> List[Dict[str, Any]]:
        data = self._json(self._get("/api/categories"))
        if data is not None and not isinstance(data, list):
            raise MarketplaceError("API returned an unexpected response")
        return list(data or [])

    def track_install(self, slug: str) -> None:
        """Record an install. Failures are logged and ignored."""
        try:
            self.client.post(f"{self.base_url}/api/installs", json={"slug": slug})
        except httpx.HTTPError as e:
            logger.debug("Install tracking for %s failed: %s", slug, e)


def slug_from_input(value: str) -> str:
    """Accept `owner/slug` or a bare slug."""
    return value.rstrip("/").split("/")[-1]
