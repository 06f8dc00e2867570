from __future__ import annotations

import json
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DEFAULT_JWT_SECRET = "change-me-in-production"
_PRODUCTION_LABELS = {"prod", "production"}


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from franchise_api.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Franchise Management API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for an education franchise network (HQ, Master Franchisees, "
            "Learning Centers and Teacher Trainers). Provides accounts, catalogs, "
            "student/teacher records, learning groups, orders and inventory."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, seed the default HQ/MF/LC/TT accounts and admin users after migrations.",
    )

    # Auth
    JWT_SECRET_KEY: str = Field(
        default=_DEFAULT_JWT_SECRET,
        description="Secret used to sign JWTs. Must be overridden outside development.",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 7, description="Access token lifetime in minutes (default 7 days)"
    )
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 30, description="Refresh token lifetime in minutes (default 30 days)"
    )
    PASSWORD_MIN_LENGTH: int = Field(default=8, ge=1)

    # Listing defaults
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)

    # Orders
    ORDER_TAX_RATE: float = Field(
        default=0.0, ge=0, description="Tax rate applied to order subtotals (0.1 = 10%)"
    )

    # Royalties: an LC pays its MF a share of tuition revenue, and the MF passes part of that to HQ
    ROYALTY_TIER_STUDENTS: int = Field(
        default=100, ge=0, description="Students per LC billed at the first-tier rate"
    )
    ROYALTY_FIRST_TIER_RATE: float = Field(default=0.14, ge=0, le=1)
    ROYALTY_BEYOND_TIER_RATE: float = Field(default=0.12, ge=0, le=1)
    ROYALTY_MF_TO_HQ_RATE: float = Field(
        default=0.5, ge=0, le=1, description="Share of LC commissions an MF forwards to HQ"
    )

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Root log level (DEBUG, INFO, WARNING, ...)")

    # Automatically load from .env at runtime.
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """Accept a JSON array or a comma-separated string of origins."""
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                v = json.loads(text)
            else:
                v = [p.strip() for p in text.split(",") if p.strip()]
        if isinstance(v, list):
            return [str(origin) for origin in v] or ["*"]
        return ["*"]

    @model_validator(mode="after")
    def _require_real_secret_in_production(self) -> "AppSettings":
        if self.is_production and self.JWT_SECRET_KEY == _DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set when ENVIRONMENT is production")
        return self

    @property
    def is_production(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in _PRODUCTION_LABELS

    @property
    def cors_credentials_allowed(self) -> bool:
        """CORS_ALLOW_CREDENTIALS, forced off while the origins include '*'."""
        return self.CORS_ALLOW_CREDENTIALS and "*" not in self.CORS_ORIGINS


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    A fresh instance is built on each call so tests can change the environment.
    """
    return AppSettings()
