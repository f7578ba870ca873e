import os
import logging
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

BACKENDS = ("none", "sql", "sheets")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Runtime settings read from the environment (.env supported).

    Built once at startup and handed to the store and the data service.
    Keyword overrides win over the environment, which keeps tests free of
    os.environ patching.
    """

    def __init__(self, **overrides):
        def env(key, default=None):
            return overrides.get(key, os.getenv(key.upper(), default))

        # development | production
        self.APP_ENV = (env("app_env", "development") or "development").lower()

        # Durable backend feature flag: none | sql | sheets
        self.STORE_BACKEND = (env("store_backend", "none") or "none").lower()
        if self.STORE_BACKEND not in BACKENDS:
            raise ValueError(
                f"STORE_BACKEND must be one of {', '.join(BACKENDS)}, got {self.STORE_BACKEND!r}"
            )

        # Database Configuration
        self.DB_USER = env("db_user", "postgres")
        self.DB_PASS = env("db_pass", "postgres")
        self.DB_HOST = env("db_host")
        self.DB_PORT = env("db_port", "5432")
        self.DB_NAME = env("db_name", "landlord")
        self._database_url = env("database_url")

        # Google Sheets (OAuth tokens come from a completed consent flow)
        self.GOOGLE_CLIENT_ID = env("google_client_id")
        self.GOOGLE_CLIENT_SECRET = env("google_client_secret")
        self.GOOGLE_ACCESS_TOKEN = env("google_access_token")
        self.GOOGLE_REFRESH_TOKEN = env("google_refresh_token")
        self.GOOGLE_USER_EMAIL = env("google_user_email")
        self.SPREADSHEET_ID = env("spreadsheet_id")

        cascade = overrides.get("cascade_repairs")
        self.CASCADE_REPAIRS = cascade if isinstance(cascade, bool) else _env_flag("CASCADE_REPAIRS", True)

        self.LOG_LEVEL = (env("log_level", "INFO") or "INFO").upper()

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def DATABASE_URL(self) -> Optional[str]:
        # Prefer DATABASE_URL if set (for SQLite support)
        if self._database_url:
            return self._database_url

        if not self.DB_HOST:
            return None

        # Build PostgreSQL URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def describe(self) -> str:
        if self.STORE_BACKEND == "sql":
            url = self.DATABASE_URL or "<missing>"
            target = url.split("@")[1] if "@" in url else url
        elif self.STORE_BACKEND == "sheets":
            target = self.SPREADSHEET_ID or "<missing>"
        else:
            target = "memory"
        return f"env={self.APP_ENV} backend={self.STORE_BACKEND} target={target}"


def load_config(**overrides) -> Config:
    config = Config(**overrides)
    logging.info(f"Landlord configured: {config.describe()}")
    return config
