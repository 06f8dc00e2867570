import asyncio
import os

# App settings are read when franchise_api.api.main is imported.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("AUTO_SEED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///./unused-test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from franchise_api.api.main import app
from franchise_api.db import Base
from franchise_api.db.seed import SEED_PASSWORD, seed_organizations
from franchise_api.db.session import get_async_session


async def _prepare(engine, maker):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with maker() as session:
        seeded = await seed_organizations(session)
        await session.commit()
        return {key: row.id for key, row in seeded.items()}


@pytest.fixture()
def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture()
def session_maker(engine):
    """Session factory on the per-test database, for tests that work below the HTTP layer."""
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture()
def seeded_app(engine, session_maker):
    maker = session_maker
    ids = asyncio.run(_prepare(engine, maker))

    async def _session():
        async with maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    yield ids
    app.dependency_overrides.clear()


@pytest.fixture()
def ids(seeded_app):
    """Ids of the seeded HQ001/MF001/LC001/TT001 accounts and their admin users."""
    return seeded_app


@pytest.fixture()
def client(seeded_app):
    with TestClient(app) as c:
        yield c


def _login(client, email, password=SEED_PASSWORD):
    r = client.post("/api/v1/auth/login", data={"username": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def login_as(client):
    """Return auth headers for any user, e.g. one registered during the test."""
    return lambda email, password=SEED_PASSWORD: _login(client, email, password)


@pytest.fixture()
def hq(client):
    return _login(client, "admin@iqup.com")


@pytest.fixture()
def mf(client):
    return _login(client, "mf.admin@iqup.com")


@pytest.fixture()
def lc(client):
    return _login(client, "lc.admin@iqup.com")


@pytest.fixture()
def tt(client):
    return _login(client, "tt.admin@iqup.com")
