"""Catalog storage interface shared by the Supabase and SQLite backends."""

from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, List, Optional, Set

from ..models import Category, Client, Listing, ListingClient, TagCount

Record = Dict[str, Any]


class StoreError(Exception):
    """A catalog write or read failed at the backend."""


class CatalogStore(ABC):
    """Persistence for listings, categories, clients and their links.

    Listing rows are plain dicts in the flattened column layout of
    `Listing.to_record()`, plus `id` and the `review_*` columns. `tags`
    and `platforms` are always lists.
    """

    backend = "abstract"

    @abstractmethod
    def upsert_listing(self, listing: Listing) -> Record:
        """Insert or update by slug; return `{id, slug, name}`.

        Raises:
            StoreError: when the backend rejects the write.
        """

    @abstractmethod
    def get_listing(self, slug: str) -> Optional[Record]:
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    def update_listing(self, listing_id: str, fields: Record) -> None:
        pass

    @abstractmethod
    def get_category_id(self, slug: str) -> Optional[str]:
        pass

    @abstractmethod
    def list_categories(self) -> List[Category]:
        pass

    @abstractmethod
    def get_client_id(self, slug: str) -> Optional[str]:
        pass

    @abstractmethod
    def list_clients(self) -> List[Client]:
        pass

    @abstractmethod
    def upsert_listing_client(self, link: ListingClient) -> None:
        """Insert or update by `(skill_id, client_id)`."""

    @abstractmethod
    def listing_client_ids(self, skill_id: str) -> Set[str]:
        pass

    @abstractmethod
    def seed_reference_data(self) -> None:
        """Insert the category taxonomy and client list where missing."""

    def all_tags(self) -> List[TagCount]:
        """Tag usage across published listings, most used first."""
        counts: Counter = Counter()
        for row in self.iter_listings(status="published"):
            counts.update(set(row.get("tags") or []))
        return [TagCount(tag, count) for tag, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()
