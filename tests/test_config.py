import pytest
from pydantic import ValidationError

from franchise_api.core.settings import AppSettings
from franchise_api.db.config import Settings


def test_database_urls_gain_async_drivers():
    pg = Settings(DATABASE_URL="postgres://app:s3cret@db:5432/franchise")
    assert pg.async_database_url == "postgresql+asyncpg://app:s3cret@db:5432/franchise"
    assert pg.sync_database_url == "postgresql://app:s3cret@db:5432/franchise"
    assert pg.is_sqlite is False

    lite = Settings(DATABASE_URL="sqlite:///./franchise.db")
    assert lite.async_database_url == "sqlite+aiosqlite:///./franchise.db"
    assert lite.sync_database_url == "sqlite:///./franchise.db"
    assert lite.is_sqlite is True


def test_database_url_from_postgres_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("POSTGRES_URL", raising=False)
    cfg = Settings(
        _env_file=None, POSTGRES_USER="app", POSTGRES_PASSWORD="p@ss", POSTGRES_DB="franchise", POSTGRES_HOST="db"
    )
    assert cfg.async_database_url == "postgresql+asyncpg://app:p%40ss@db:5432/franchise"


def test_missing_database_configuration(monkeypatch):
    for name in ("DATABASE_URL", "POSTGRES_URL", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ValueError):
        Settings(_env_file=None).async_database_url


def test_cors_origins_accept_csv_and_json(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    settings = AppSettings(_env_file=None)
    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
    assert settings.cors_credentials_allowed is True

    monkeypatch.setenv("CORS_ORIGINS", '["https://c.example"]')
    assert AppSettings(_env_file=None).CORS_ORIGINS == ["https://c.example"]

    monkeypatch.setenv("CORS_ORIGINS", "*")
    assert AppSettings(_env_file=None).cors_credentials_allowed is False


def test_production_requires_a_jwt_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "production")
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None)

    monkeypatch.setenv("JWT_SECRET_KEY", "a-real-secret")
    assert AppSettings(_env_file=None).is_production is True
