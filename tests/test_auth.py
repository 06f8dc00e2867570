import asyncio

import pytest

from franchise_api.core.errors import PermissionDeniedError
from franchise_api.schemas.auth import RegisterRequest
from franchise_api.services.auth import AuthService


def test_health_and_correlation_id(client):
    r = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
    assert r.status_code == 200
    assert r.json()["message"] == "Healthy"
    assert r.headers["X-Correlation-ID"] == "abc-123"


def test_login_returns_tokens_and_profile(client, ids):
    r = client.post("/api/v1/auth/login", data={"username": "LC.Admin@iqup.com", "password": "admin123456"})
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["refresh_token"]
    assert body["user"]["role"] == "LC_ADMIN"
    assert body["user"]["lc_id"] == ids["lc"]
    assert body["user"]["mf_id"] == ids["mf"]
    assert body["user"]["lc"]["code"] == "LC001"
    assert body["user"]["last_login_at"] is not None


def test_login_rejects_bad_password(client):
    r = client.post("/api/v1/auth/login", data={"username": "admin@iqup.com", "password": "wrong-password"})
    assert r.status_code == 401
    body = r.json()
    assert body["error"]["type"] == "http_error"
    assert body["error"]["message"] == "Invalid email or password"
    assert body["path"] == "/api/v1/auth/login"


def test_me_requires_token(client, hq):
    assert client.get("/api/v1/auth/me").status_code == 401
    r = client.get("/api/v1/auth/me", headers=hq)
    assert r.status_code == 200
    assert r.json()["email"] == "admin@iqup.com"


def test_refresh_issues_new_pair(client):
    tokens = client.post(
        "/api/v1/auth/login", data={"username": "mf.admin@iqup.com", "password": "admin123456"}
    ).json()
    r = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    assert r.json()["access_token"]

    r = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert r.status_code == 401


def test_navigation_for_lc(client, lc):
    r = client.get("/api/v1/auth/navigation", headers=lc)
    assert r.status_code == 200
    body = r.json()
    assert body["tier"] == "LC"
    hrefs = [item["href"] for item in body["items"]]
    assert "/accounts" not in hrefs
    assert "/learning-groups" in hrefs


def test_register_user_under_reachable_account(client, ids, mf, login_as):
    payload = {
        "email": "New.Staff@iqup.com",
        "password": "longenough1",
        "first_name": "New",
        "last_name": "Staff",
        "role": "lc_staff",
        "account_type": "LC",
        "account_id": ids["lc"],
    }
    r = client.post("/api/v1/auth/register", json=payload, headers=mf)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["email"] == "new.staff@iqup.com"
    assert (body["hq_id"], body["mf_id"], body["lc_id"]) == (ids["hq"], ids["mf"], ids["lc"])

    # the new user can log in
    assert login_as("new.staff@iqup.com", "longenough1")

    r = client.post("/api/v1/auth/register", json=payload, headers=mf)
    assert r.status_code == 409
    assert r.json()["error"]["message"] == "Email already exists"


def test_register_rules(client, ids, lc):
    base = {
        "email": "someone@iqup.com",
        "password": "longenough1",
        "first_name": "Some",
        "last_name": "One",
    }
    # role above the caller's own
    r = client.post(
        "/api/v1/auth/register",
        json={**base, "role": "MF_STAFF", "account_type": "MF", "account_id": ids["mf"]},
        headers=lc,
    )
    assert r.status_code == 403

    # role does not match the account type
    r = client.post(
        "/api/v1/auth/register",
        json={**base, "role": "LC_STAFF", "account_type": "MF", "account_id": ids["mf"]},
        headers=lc,
    )
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Role does not match account type"

    # password too short
    r = client.post(
        "/api/v1/auth/register",
        json={**base, "password": "short", "role": "LC_STAFF", "account_type": "LC", "account_id": ids["lc"]},
        headers=lc,
    )
    assert r.status_code == 400


def test_register_requires_authentication(client, ids):
    r = client.post(
        "/api/v1/auth/register",
        json={
            "email": "anon@iqup.com",
            "password": "longenough1",
            "first_name": "A",
            "last_name": "Non",
            "role": "LC_STAFF",
            "account_type": "LC",
            "account_id": ids["lc"],
        },
    )
    assert r.status_code == 401


def test_register_service_refuses_anonymous_caller(ids, session_maker):
    payload = RegisterRequest(
        email="anon@iqup.com",
        password="longenough1",
        first_name="A",
        last_name="Non",
        role="LC_STAFF",
        account_type="LC",
        account_id=ids["lc"],
    )

    async def register():
        async with session_maker() as session:
            await AuthService(session).register(payload)

    with pytest.raises(PermissionDeniedError):
        asyncio.run(register())
