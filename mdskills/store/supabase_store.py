"""Hosted catalog access through Supabase's PostgREST endpoint."""

import logging
from typing import Any, Dict, List, Optional, Set

import httpx

from ..models import Category, Client, Listing, ListingClient
from .base import CatalogStore, Record, StoreError
from .reference import default_categories, default_clients

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


class SupabaseStore(CatalogStore):
    """CatalogStore over PostgREST, authenticated with the service-role key."""

    backend = "supabase"

    def __init__(
        self,
        url: str,
        service_role_key: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 15.0,
    ):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = self.client.request(
                method, f"{self.base_url}/{table}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {table} failed: {e}") from e

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = (body.get("message") if isinstance(body, dict) else None) or response.text
            raise StoreError(message or f"HTTP {response.status_code}")
        if not response.content:
            return None
        return response.json()

    def _select(self, table: str, params: Dict[str, Any]) -> List[Record]:
        return self._request("GET", table, params=params) or []

    # ---- listings ------------------------------------------------------

    def upsert_listing(self, listing: Listing) -> Record:
        rows = self._request(
            "POST",
            "skills",
            params={"on_conflict": "slug", "select": "id,slug,name"},
            json=[listing.to_record()],
            prefer="resolution=merge-duplicates,return=representation",
        )
        if not rows:
            raise StoreError(f"Upsert of {listing.slug} returned no row")
        row = rows[0]
        return {"id": str(row["id"]), "slug": row["slug"], "name": row["name"]}

    def get_listing(self, slug: str) -> Optional[Record]:
        rows = self._select("skills", {"select": "*", "slug": f"eq.{slug}", "limit": 1})
        return _normalize(rows[0]) if rows else None

    def iter_listings(
        self,
        status: Optional[str] = "published",
        owner: Optional[str] = None,
        without_category: bool = False,
        without_review: bool = False,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Record]:
        params: Dict[str, Any] = {"select": "*"}
        if status:
            params["status"] = f"eq.{status}"
        if owner:
            params["owner"] = f"eq.{owner}"
        if without_category:
            params["category_id"] = "is.null"
        if without_review:
            params["review_generated_at"] = "is.null"
        params["order"] = f"{order_by}.{'desc' if descending else 'asc'},id.asc" if order_by else "id.asc"

        if limit:
            return [_normalize(row) for row in self._select("skills", {**params, "limit": limit})]

        rows: List[Record] = []
        offset = 0
        while True:
            page = self._select("skills", {**params, "limit": PAGE_SIZE, "offset": offset})
            rows.extend(_normalize(row) for row in page)
            if len(page) < PAGE_SIZE:
                return rows
            offset += PAGE_SIZE

    def update_listing(self, listing_id: str, fields: Record) -> None:
        if fields:
            self._request("PATCH", "skills", params={"id": f"eq.{listing_id}"}, json=fields, prefer="return=minimal")

    # ---- reference data ------------------------------------------------

    def get_category_id(self, slug: str) -> Optional[str]:
        rows = self._select("categories", {"select": "id", "slug": f"eq.{slug}", "limit": 1})
        return str(rows[0]["id"]) if rows else None

    def list_categories(self) -> List[Category]:
        rows = self._select(
            "categories", {"select": "id,slug,name,description,sort_order", "order": "sort_order.asc"}
        )
        return [
            Category(
                slug=row["slug"],
                name=row["name"],
                id=str(row["id"]),
                description=row.get("description"),
                sort_order=row.get("sort_order") or 0,
            )
            for row in rows
        ]

    def get_client_id(self, slug: str) -> Optional[str]:
        rows = self._select("clients", {"select": "id", "slug": f"eq.{slug}", "limit": 1})
        return str(rows[0]["id"]) if rows else None

    def list_clients(self) -> List[Client]:
        rows = self._select(
            "clients", {"select": "id,slug,name,website_url,sort_order", "order": "sort_order.asc"}
        )
        return [
            Client(
                slug=row["slug"],
                name=row["name"],
                id=str(row["id"]),
                website_url=row.get("website_url"),
                sort_order=row.get("sort_order") or 0,
            )
            for row in rows
        ]

    def upsert_listing_client(self, link: ListingClient) -> None:
        self._request(
            "POST",
            "listing_clients",
            params={"on_conflict": "skill_id,client_id"},
            json=[
                {
                    "skill_id": link.skill_id,
                    "client_id": link.client_id,
                    "install_instructions": link.install_instructions,
                    "is_primary": link.is_primary,
                }
            ],
            prefer="resolution=merge-duplicates,return=minimal",
        )

    def listing_client_ids(self, skill_id: str) -> Set[str]:
        rows = self._select("listing_clients", {"select": "client_id", "skill_id": f"eq.{skill_id}"})
        return {str(row["client_id"]) for row in rows}

    def seed_reference_data(self) -> None:
        """Insert missing categories and clients; existing rows are left alone."""
        self._request(
            "POST",
            "categories",
            params={"on_conflict": "slug"},
            json=[{"slug": c.slug, "name": c.name, "sort_order": c.sort_order} for c in default_categories()],
            prefer="resolution=ignore-duplicates,return=minimal",
        )
        self._request(
            "POST",
            "clients",
            params={"on_conflict": "slug"},
            json=[
                {"slug": c.slug, "name": c.name, "website_url": c.website_url, "sort_order": c.sort_order}
                for c in default_clients()
            ],
            prefer="resolution=ignore-duplicates,return=minimal",
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()


def _normalize(row: Record) -> Record:
    record = dict(row)
    for key in ("id", "category_id"):
        if record.get(key) is not None:
            record[key] = str(record[key])
    record["tags"] = record.get("tags") or []
    record["platforms"] = record.get("platforms") or []
    return record
