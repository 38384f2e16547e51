"""Local SQLite catalog with the same four tables as the hosted one."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set

from ..models import Category, Client, Listing, ListingClient
from .base import CatalogStore, Record, StoreError
from .reference import default_categories, default_clients

logger = logging.getLogger(__name__)

JSON_COLUMNS = ("tags", "platforms", "review_strengths", "review_weaknesses")
BOOL_COLUMNS = (
    "featured", "has_plugin", "has_examples",
    "perm_filesystem_read", "perm_filesystem_write", "perm_shell_exec",
    "perm_network_access", "perm_git_write",
)
ORDERABLE_COLUMNS = {"weekly_installs", "github_stars", "created_at", "updated_at", "name", "slug"}


class SQLiteStore(CatalogStore):
    """SQLite-backed catalog, used for offline imports and tests."""

    backend = "sqlite"

    def __init__(self, db_path: Optional[Path] = None, seed: bool = True):
        self.db_path = Path(db_path) if db_path else Path.home() / ".mdskills" / "catalog.db"
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys=ON")
        self._init_schema()
        if seed:
            self.seed_reference_data()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                slug TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                description TEXT,
                sort_order INTEGER NOT NULL DEFAULT 0
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                slug TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                website_url TEXT,
                sort_order INTEGER NOT NULL DEFAULT 0
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS skills (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                slug TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                description TEXT NOT NULL,
                owner TEXT NOT NULL,
                repo TEXT NOT NULL,
                skill_path TEXT,
                github_url TEXT,
                content TEXT,
                readme TEXT,
                artifact_type TEXT NOT NULL DEFAULT 'skill_pack',
                format_standard TEXT NOT NULL DEFAULT 'skill_md',
                platforms TEXT NOT NULL DEFAULT '[]',
                tags TEXT NOT NULL DEFAULT '[]',
                category_id INTEGER REFERENCES categories(id),
                status TEXT NOT NULL DEFAULT 'published',
                featured INTEGER NOT NULL DEFAULT 0,
                skill_type TEXT,
                has_plugin INTEGER NOT NULL DEFAULT 0,
                has_examples INTEGER NOT NULL DEFAULT 0,
                difficulty TEXT,
                author_username TEXT,
                github_stars INTEGER NOT NULL DEFAULT 0,
                github_forks INTEGER NOT NULL DEFAULT 0,
                license TEXT,
                weekly_installs INTEGER NOT NULL DEFAULT 0,
                mdskills_upvotes INTEGER NOT NULL DEFAULT 0,
                mdskills_forks INTEGER NOT NULL DEFAULT 0,
                perm_filesystem_read INTEGER NOT NULL DEFAULT 0,
                perm_filesystem_write INTEGER NOT NULL DEFAULT 0,
                perm_shell_exec INTEGER NOT NULL DEFAULT 0,
                perm_network_access INTEGER NOT NULL DEFAULT 0,
                perm_git_write INTEGER NOT NULL DEFAULT 0,
                review_summary TEXT,
                review_strengths TEXT,
                review_weaknesses TEXT,
                review_quality_score REAL,
                review_generated_at DATETIME,
                created_at DATETIME NOT NULL,
                updated_at DATETIME NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS listing_clients (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                skill_id INTEGER NOT NULL REFERENCES skills(id) ON DELETE CASCADE,
                client_id INTEGER NOT NULL REFERENCES clients(id),
                install_instructions TEXT,
                is_primary INTEGER NOT NULL DEFAULT 0,
                UNIQUE(skill_id, client_id)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_skills_category
            ON skills(category_id)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_skills_owner
            ON skills(owner)
        """)

        self.conn.commit()

    def seed_reference_data(self) -> None:
        """Insert the category taxonomy and client list; existing rows are kept."""
        cursor = self.conn.cursor()
        for category in default_categories():
            cursor.execute(
                "INSERT OR IGNORE INTO categories (slug, name, description, sort_order) VALUES (?, ?, ?, ?)",
                (category.slug, category.name, category.description, category.sort_order),
            )
        for client in default_clients():
            cursor.execute(
                "INSERT OR IGNORE INTO clients (slug, name, website_url, sort_order) VALUES (?, ?, ?, ?)",
                (client.slug, client.name, client.website_url, client.sort_order),
            )
        self.conn.commit()

    # ---- listings ------------------------------------------------------

    @staticmethod
    def _encode(record: Record) -> Record:
        encoded = dict(record)
        for key in JSON_COLUMNS:
            if key in encoded and encoded[key] is not None:
                encoded[key] = json.dumps(encoded[key])
        for key in BOOL_COLUMNS:
            if key in encoded:
                encoded[key] = int(bool(encoded[key]))
        if encoded.get("category_id") is not None:
            encoded["category_id"] = int(encoded["category_id"])
        return encoded

    @staticmethod
    def _decode(row: sqlite3.Row) -> Record:
        record = dict(row)
        for key in JSON_COLUMNS:
            value = record.get(key)
            if isinstance(value, str):
                record[key] = json.loads(value)
        for key in BOOL_COLUMNS:
            if key in record:
                record[key] = bool(record[key])
        for key in ("id", "category_id"):
            if record.get(key) is not None:
                record[key] = str(record[key])
        record["tags"] = record.get("tags") or []
        record["platforms"] = record.get("platforms") or []
        return record

    def upsert_listing(self, listing: Listing) -> Record:
        record = self._encode(listing.to_record())
        now = datetime.now().isoformat()
        record["created_at"] = now
        record["updated_at"] = now

        columns = list(record)
        updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c not in ("slug", "created_at"))
        sql = (
            f"INSERT INTO skills ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)}) "
            f"ON CONFLICT(slug) DO UPDATE SET {updates}"
        )
        try:
            self.conn.execute(sql, [record[c] for c in columns])
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StoreError(str(e)) from e

        row = self.conn.execute(
            "SELECT id, slug, name FROM skills WHERE slug = ?", (listing.slug,)
        ).fetchone()
        return {"id": str(row["id"]), "slug": row["slug"], "name": row["name"]}

    def get_listing(self, slug: str) -> Optional[Record]:
        row = self.conn.execute("SELECT * FROM skills WHERE slug = ?", (slug,)).fetchone()
        return self._decode(row) if row else None

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
        clauses = []
        params: list = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if owner:
            clauses.append("owner = ?")
            params.append(owner)
        if without_category:
            clauses.append("category_id IS NULL")
        if without_review:
            clauses.append("review_generated_at IS NULL")

        sql = "SELECT * FROM skills"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        if order_by:
            if order_by not in ORDERABLE_COLUMNS:
                raise StoreError(f"Cannot order by {order_by}")
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}, id ASC"
        else:
            sql += " ORDER BY id ASC"
        if limit:
            sql += " LIMIT ?"
            params.append(int(limit))

        return [self._decode(row) for row in self.conn.execute(sql, params).fetchall()]

    def update_listing(self, listing_id: str, fields: Record) -> None:
        if not fields:
            return
        encoded = self._encode(fields)
        encoded["updated_at"] = datetime.now().isoformat()
        assignments = ", ".join(f"{key} = ?" for key in encoded)
        try:
            self.conn.execute(
                f"UPDATE skills SET {assignments} WHERE id = ?",
                [*encoded.values(), int(listing_id)],
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StoreError(str(e)) from e

    # ---- reference data ------------------------------------------------

    def get_category_id(self, slug: str) -> Optional[str]:
        row = self.conn.execute("SELECT id FROM categories WHERE slug = ?", (slug,)).fetchone()
        return str(row["id"]) if row else None

    def list_categories(self) -> List[Category]:
        rows = self.conn.execute(
            "SELECT * FROM categories ORDER BY sort_order ASC, slug ASC"
        ).fetchall()
        return [
            Category(
                slug=row["slug"],
                name=row["name"],
                id=str(row["id"]),
                description=row["description"],
                sort_order=row["sort_order"],
            )
            for row in rows
        ]

    def get_client_id(self, slug: str) -> Optional[str]:
        row = self.conn.execute("SELECT id FROM clients WHERE slug = ?", (slug,)).fetchone()
        return str(row["id"]) if row else None

    def list_clients(self) -> List[Client]:
        rows = self.conn.execute("SELECT * FROM clients ORDER BY sort_order ASC, slug ASC").fetchall()
        return [
            Client(
                slug=row["slug"],
                name=row["name"],
                id=str(row["id"]),
                website_url=row["website_url"],
                sort_order=row["sort_order"],
            )
            for row in rows
        ]

    def upsert_listing_client(self, link: ListingClient) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO listing_clients (skill_id, client_id, install_instructions, is_primary)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(skill_id, client_id) DO UPDATE SET
                    install_instructions = excluded.install_instructions,
                    is_primary = excluded.is_primary
                """,
                (int(link.skill_id), int(link.client_id), link.install_instructions, int(link.is_primary)),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StoreError(str(e)) from e

    def listing_client_ids(self, skill_id: str) -> Set[str]:
        rows = self.conn.execute(
            "SELECT client_id FROM listing_clients WHERE skill_id = ?", (int(skill_id),)
        ).fetchall()
        return {str(row["client_id"]) for row in rows}

    def close(self):
        """Close database connection."""
        self.conn.close()
