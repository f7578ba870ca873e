import logging
from typing import Optional

from landlord.errors import ConfigurationError
from landlord.services.google_auth import GoogleTokenHolder
from .base import StoreAdapter
from .sql_store import SqlStore
from .sheets_store import SheetsStore

__all__ = ["StoreAdapter", "SqlStore", "SheetsStore", "create_store"]


def create_store(config, auth=None) -> Optional[StoreAdapter]:
    """Pick the durable backend named by STORE_BACKEND (None = in-memory only)."""
    backend = config.STORE_BACKEND

    if backend == "none":
        logging.info("No durable backend configured, running in memory")
        return None

    if backend == "sql":
        if not config.DATABASE_URL:
            raise ConfigurationError(
                "Missing database configuration. Set DATABASE_URL or DB_HOST/DB_NAME."
            )
        return SqlStore(config.DATABASE_URL)

    if backend == "sheets":
        if not config.SPREADSHEET_ID:
            raise ConfigurationError("Missing Google Sheets configuration. Set SPREADSHEET_ID.")
        if auth is None:
            if not config.GOOGLE_CLIENT_ID:
                raise ConfigurationError("Google Client ID not configured. Set GOOGLE_CLIENT_ID.")
            auth = GoogleTokenHolder.from_config(config)
        return SheetsStore(auth, config.SPREADSHEET_ID)

    raise ConfigurationError(f"Unknown store backend: {backend}")
