"""Bulk corrections over existing listings: tags, categories, client links.

Every backfill is a dry run unless `apply=True`. Reports describe what
changed (or would change) so the CLI can print them.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .builder import install_instructions
from .inference import clients_for_listing, extract_tags_from_content, merge_tags, score_categories
from .inference.categories import BACKFILL_README_WINDOW, DEFAULT_MIN_SCORE
from .models import ListingClient
from .store import CatalogStore, StoreError

logger = logging.getLogger(__name__)


@dataclass
class Change:
    """One listing touched by a backfill"""

    slug: str
    added: List[str] = field(default_factory=list)
    value: Optional[str] = None
    status: str = "updated"
    error: Optional[str] = None


@dataclass
class BackfillReport:
    applied: bool
    processed: int = 0
    changes: List[Change] = field(default_factory=list)
    unchanged: int = 0
    cleared: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return sum(1 for c in self.changes if c.status == "updated")

    @property
    def skipped(self) -> int:
        return sum(1 for c in self.changes if c.status != "updated")


def _listings(store: CatalogStore, slug: Optional[str] = None, **filters) -> list:
    if slug:
        row = store.get_listing(slug)
        return [row] if row else []
    return store.iter_listings(**filters)


def backfill_tags(
    store: CatalogStore,
    apply: bool = False,
    slug: Optional[str] = None,
    on_change: Optional[Callable[[Change], None]] = None,
) -> BackfillReport:
    """Add content-derived tags to listings; existing tags are kept first."""
    report = BackfillReport(applied=apply)
    for row in _listings(store, slug):
        report.processed += 1
        existing = list(row.get("tags") or [])
        extracted = extract_tags_from_content(row.get("repo") or "", row.get("description") or "", row.get("readme"))
        merged = merge_tags(existing, extracted)
        new_tags = [t for t in merged if t not in existing]
        if not new_tags:
            report.unchanged += 1
            continue

        change = Change(slug=row["slug"], added=new_tags)
        if apply:
            try:
                store.update_listing(row["id"], {"tags": merged})
            except StoreError as e:
                logger.warning("Could not update tags for %s: %s", row["slug"], e)
                change.error = str(e)
        report.changes.append(change)
        if on_change:
            on_change(change)
    return report


def backfill_categories(
    store: CatalogStore,
    apply: bool = False,
    reset_owner: Optional[str] = None,
    min_score: int = DEFAULT_MIN_SCORE,
    on_change: Optional[Callable[[Change], None]] = None,
) -> BackfillReport:
    """Assign categories to uncategorized listings.

    With `reset_owner`, every listing by that owner is re-detected, and when
    applying their current categories are cleared first.
    """
    report = BackfillReport(applied=apply)
    category_ids = {c.slug: c.id for c in store.list_categories()}

    if reset_owner:
        rows = store.iter_listings(owner=reset_owner)
        if apply:
            for row in rows:
                if row.get("category_id") is None:
                    continue
                try:
                    store.update_listing(row["id"], {"category_id": None})
                except StoreError as e:
                    logger.warning("Could not clear category for %s: %s", row["slug"], e)
                    report.errors.append(f"{row['slug']}: {e}")
                    continue
                report.cleared += 1
    else:
        rows = store.iter_listings(without_category=True)

    for row in rows:
        report.processed += 1
        # Tags play the role of author-chosen topics here.
        match = score_categories(
            row.get("tags") or [],
            row.get("description") or "",
            row.get("name") or "",
            row.get("readme"),
            readme_window=BACKFILL_README_WINDOW,
        )
        detected = match.slug if match.score >= min_score else None

        if detected is None:
            change = Change(slug=row["slug"], status="no_match")
        elif detected not in category_ids:
            change = Change(slug=row["slug"], value=detected, status="missing")
        else:
            change = Change(slug=row["slug"], value=detected)
            if apply:
                try:
                    store.update_listing(row["id"], {"category_id": category_ids[detected]})
                except StoreError as e:
                    logger.warning("Could not set category for %s: %s", row["slug"], e)
                    change.error = str(e)
        report.changes.append(change)
        if on_change:
            on_change(change)
    return report


def backfill_clients(
    store: CatalogStore,
    apply: bool = False,
    on_change: Optional[Callable[[Change], None]] = None,
) -> BackfillReport:
    """Link listings to every client their format supports; existing links are kept."""
    report = BackfillReport(applied=apply)
    client_ids = {c.slug: c.id for c in store.list_clients()}

    for row in store.iter_listings():
        report.processed += 1
        artifact_type = row.get("artifact_type") or "skill_pack"
        targets = clients_for_listing(artifact_type, row.get("format_standard") or "skill_md")
        linked = store.listing_client_ids(row["id"])
        missing = [s for s in targets if s in client_ids and client_ids[s] not in linked]
        if not missing:
            report.unchanged += 1
            continue

        change = Change(slug=row["slug"], added=missing)
        if apply:
            for client_slug in missing:
                link = ListingClient(
                    skill_id=row["id"],
                    client_id=client_ids[client_slug],
                    install_instructions=install_instructions(
                        artifact_type, client_slug, row["slug"], row.get("owner") or "", row.get("repo") or ""
                    ),
                    is_primary=client_slug == "claude-code",
                )
                try:
                    store.upsert_listing_client(link)
                except StoreError as e:
                    logger.warning("Could not link %s to %s: %s", row["slug"], client_slug, e)
                    change.error = str(e)
        report.changes.append(change)
        if on_change:
            on_change(change)
    return report
