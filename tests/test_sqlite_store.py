from __future__ import annotations

from pathlib import Path

import pytest

from mdskills.models import Listing, ListingClient, Permissions
from mdskills.store import SQLiteStore, StoreError
from mdskills.store.reference import CLIENT_NAMES, default_categories


def _listing(slug: str, **fields) -> Listing:
    values = dict(
        slug=slug,
        name=slug.title(),
        description="d",
        owner="acme",
        repo=slug,
        skill_path="",
        github_url=f"https://github.com/acme/{slug}",
        content="body",
    )
    values.update(fields)
    return Listing(**values)


def test_seeded_reference_data(store: SQLiteStore) -> None:
    categories = store.list_categories()
    assert [c.slug for c in categories] == [c.slug for c in default_categories()]
    assert len(store.list_clients()) == len(CLIENT_NAMES)
    assert store.get_category_id("testing") is not None
    assert store.get_client_id("nope") is None


def test_seeding_twice_keeps_rows(store: SQLiteStore) -> None:
    before = store.get_category_id("testing")
    store.seed_reference_data()
    assert store.get_category_id("testing") == before
    assert len(store.list_categories()) == len(default_categories())


def test_upsert_round_trips_columns(store: SQLiteStore) -> None:
    listing = _listing(
        "pdf",
        tags=["pdf", "docs"],
        platforms=["claude-code"],
        permissions=Permissions(shell_exec=True),
        has_plugin=True,
        license="MIT",
    )
    saved = store.upsert_listing(listing)

    assert saved == {"id": saved["id"], "slug": "pdf", "name": "Pdf"}
    row = store.get_listing("pdf")
    assert row["id"] == saved["id"]
    assert row["tags"] == ["pdf", "docs"]
    assert row["platforms"] == ["claude-code"]
    assert row["perm_shell_exec"] is True
    assert row["perm_git_write"] is False
    assert row["has_plugin"] is True
    assert row["license"] == "MIT"
    assert store.get_listing("missing") is None


def test_iter_listings_filters_and_order(store: SQLiteStore) -> None:
    category_id = store.get_category_id("testing")
    store.upsert_listing(_listing("a", weekly_installs=5, category_id=category_id))
    store.upsert_listing(_listing("b", weekly_installs=50, owner="other"))
    store.upsert_listing(_listing("c", status="draft"))

    assert [r["slug"] for r in store.iter_listings()] == ["a", "b"]
    assert [r["slug"] for r in store.iter_listings(status=None)] == ["a", "b", "c"]
    assert [r["slug"] for r in store.iter_listings(owner="other")] == ["b"]
    assert [r["slug"] for r in store.iter_listings(without_category=True)] == ["b"]
    assert [r["slug"] for r in store.iter_listings(order_by="weekly_installs")] == ["b", "a"]
    assert [r["slug"] for r in store.iter_listings(limit=1)] == ["a"]

    with pytest.raises(StoreError):
        store.iter_listings(order_by="content; DROP TABLE skills")


def test_update_listing_and_review_filter(store: SQLiteStore) -> None:
    row_id = store.upsert_listing(_listing("a"))["id"]
    store.upsert_listing(_listing("b"))

    store.update_listing(
        row_id,
        {"review_summary": "ok", "review_strengths": ["x"], "review_generated_at": "2026-01-01T00:00:00"},
    )

    row = store.get_listing("a")
    assert row["review_strengths"] == ["x"]
    assert [r["slug"] for r in store.iter_listings(without_review=True)] == ["b"]

    with pytest.raises(StoreError):
        store.update_listing(row_id, {"no_such_column": 1})


def test_listing_clients_upsert_is_idempotent(store: SQLiteStore) -> None:
    skill_id = store.upsert_listing(_listing("a"))["id"]
    client_id = store.get_client_id("cursor")

    store.upsert_listing_client(ListingClient(skill_id, client_id, "old", False))
    store.upsert_listing_client(ListingClient(skill_id, client_id, "new", True))

    assert store.listing_client_ids(skill_id) == {client_id}


def test_all_tags_counts_published_only(store: SQLiteStore) -> None:
    store.upsert_listing(_listing("a", tags=["pdf", "python"]))
    store.upsert_listing(_listing("b", tags=["python"]))
    store.upsert_listing(_listing("c", tags=["hidden"], status="draft"))

    tags = store.all_tags()
    assert [(t.tag, t.count) for t in tags] == [("python", 2), ("pdf", 1)]


def test_context_manager_and_unseeded(tmp_path: Path) -> None:
    with SQLiteStore(tmp_path / "nested" / "db.sqlite", seed=False) as db:
        assert db.list_categories() == []
