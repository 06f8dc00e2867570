from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

_ASYNC_DRIVERS = {"postgresql": "asyncpg", "sqlite": "aiosqlite"}


class Settings(BaseSettings):
    """
    Database configuration read from environment variables (or .env via pydantic-settings).

    DATABASE_URL wins when set (PostgreSQL or SQLite). Otherwise the URL is built from:
      - POSTGRES_URL
      - POSTGRES_USER
      - POSTGRES_PASSWORD
      - POSTGRES_DB
      - POSTGRES_HOST / POSTGRES_PORT
    """

    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL. postgresql:// and sqlite:// schemes are accepted.",
    )
    POSTGRES_URL: Optional[str] = Field(
        default=None, description="If provided, full PostgreSQL connection URL."
    )
    POSTGRES_USER: Optional[str] = Field(default=None, description="DB username")
    POSTGRES_PASSWORD: Optional[str] = Field(default=None, description="DB password")
    POSTGRES_DB: Optional[str] = Field(default=None, description="Database name")
    POSTGRES_PORT: Optional[int] = Field(
        default=5432, description="Database port (default 5432)"
    )
    POSTGRES_HOST: Optional[str] = Field(
        default="localhost", description="Database host (default localhost)"
    )

    # SQLAlchemy engine options
    SQL_ECHO: bool = Field(
        default=False, description="Echo SQL statements for debugging (default False)"
    )

    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def database_url(self) -> str:
        """The configured URL as given: DATABASE_URL, then POSTGRES_URL, then the POSTGRES_* parts."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.POSTGRES_URL:
            return self.POSTGRES_URL
        if not all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
            raise ValueError(
                "Database configuration missing. Ensure DATABASE_URL, POSTGRES_URL or "
                "POSTGRES_USER, POSTGRES_PASSWORD, and POSTGRES_DB are set in the environment."
            )
        return URL.create(
            "postgresql",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST or "localhost",
            port=self.POSTGRES_PORT or 5432,
            database=self.POSTGRES_DB,
        ).render_as_string(hide_password=False)

    def _url(self) -> URL:
        return make_url(self.database_url.replace("postgres://", "postgresql://", 1))

    def _with_driver(self, driver: Optional[str]) -> str:
        url = self._url()
        backend = url.get_backend_name()
        if backend not in _ASYNC_DRIVERS:
            raise ValueError(f"Unsupported database backend: {backend}")
        name = f"{backend}+{driver}" if driver else backend
        return url.set(drivername=name).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self._url().get_backend_name() == "sqlite"

    @property
    def async_database_url(self) -> str:
        """The URL with its async driver (asyncpg or aiosqlite), as AsyncEngine requires."""
        return self._with_driver(_ASYNC_DRIVERS.get(self._url().get_backend_name()))

    @property
    def sync_database_url(self) -> str:
        """Driverless URL for Alembic offline mode; online mode uses the async URL."""
        return self._with_driver(None)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return database settings read from the current environment."""
    return Settings()
