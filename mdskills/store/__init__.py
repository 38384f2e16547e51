"""Catalog persistence backends."""

import logging
from pathlib import Path
from typing import Optional

from ..config import ConfigError, Settings
from .base import CatalogStore, StoreError
from .sqlite_store import SQLiteStore
from .supabase_store import SupabaseStore

logger = logging.getLogger(__name__)


def open_store(settings: Settings, local: Optional[Path] = None) -> CatalogStore:
    """Pick a backend: an explicit local path, then Supabase, then MDSKILLS_DB_PATH.

    Raises:
        ConfigError: when no backend is configured.
    """
    if local is not None:
        logger.debug("Using local catalog at %s", local)
        return SQLiteStore(local)
    if settings.has_supabase:
        logger.debug("Using Supabase catalog at %s", settings.supabase_url)
        return SupabaseStore(
            settings.supabase_url,
            settings.supabase_service_role_key,
            timeout=settings.request_timeout,
        )
    if settings.db_path:
        logger.debug("Using local catalog at %s", settings.db_path)
        return SQLiteStore(settings.db_path)
    settings.require_supabase()
    raise ConfigError("No catalog backend configured")


__all__ = ["CatalogStore", "SQLiteStore", "StoreError", "SupabaseStore", "open_store"]
