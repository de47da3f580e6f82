"""Integration tests for the /api/auth endpoints and bearer-token handling."""

from datetime import datetime, timezone

import pytest
from jose import jwt
from libs.common.config import get_settings
from tests.factories import (
    DEFAULT_PASSWORD,
    auth_headers_for,
    create_member,
    create_user,
)


async def _register(client, **overrides):
    body = {
        "name": "Jane Doe",
        "email": "jane@fitcentre.com",
        "password": DEFAULT_PASSWORD,
        "password_confirmation": DEFAULT_PASSWORD,
    }
    body.update(overrides)
    return await client.post("/api/auth/register", json=body)


async def _login(client, email="jane@fitcentre.com", password=DEFAULT_PASSWORD):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "members"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found", "errors": None}


# ---------------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_returns_user_without_token(client):
    response = await _register(client, email="Jane@FitCentre.com")

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["message"] == "User registered successfully."
    assert body["user"]["email"] == "jane@fitcentre.com"
    assert "token" not in body
    assert "password" not in body["user"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_duplicate_email_is_409(client):
    await _register(client)

    response = await _register(client, email="JANE@fitcentre.com")

    assert response.status_code == 409
    assert response.json()["errors"] == {"email": ["The email has already been taken."]}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_validation_errors_are_422(client):
    response = await _register(client, password="short", password_confirmation="other")

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "The given data was invalid."
    assert set(body["errors"]) == {"password", "password_confirmation"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_non_object_body_is_422(client):
    response = await client.post("/api/auth/register", json=["not", "an", "object"])

    assert response.status_code == 422
    assert response.json()["message"] == "The given data was invalid."


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_returns_token(client):
    await _register(client)

    response = await _login(client)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Login successful."
    assert body["user"]["email"] == "jane@fitcentre.com"
    assert body["token"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_with_bad_credentials_is_generic(client):
    await _register(client)

    wrong_password = await _login(client, password="wrong-password")
    unknown_email = await _login(client, email="nobody@fitcentre.com")

    assert wrong_password.status_code == unknown_email.status_code == 422
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["errors"] == {
        "email": ["The provided credentials are incorrect."]
    }


# ---------------------------------------------------------------------------
# Bearer tokens
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_requires_token(client):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthenticated.", "errors": None}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_returns_user_and_live_profile(client, db_session):
    user = await create_user(db_session, name="Jane")
    headers = await auth_headers_for(db_session, user)

    without_profile = await client.get("/api/auth/me", headers=headers)
    await create_member(db_session, user, first_name="Jane", last_name="Doe")
    with_profile = await client.get("/api/auth/me", headers=headers)

    assert without_profile.status_code == 200, without_profile.text
    assert without_profile.json()["user"]["member_profile"] is None
    profile = with_profile.json()["user"]["member_profile"]
    assert profile["full_name"] == "Jane Doe"
    assert profile["user"] is None


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("token", ["garbage", "a.b.c"])
async def test_malformed_token_is_401(client, token):
    response = await client.get("/api/auth/me", headers=_bearer(token))

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_token_without_registry_row_is_401(client, db_session):
    user = await create_user(db_session)
    settings = get_settings()
    token = jwt.encode(
        {"sub": str(user.id), "jti": "never-issued", "iat": 0},
        settings.SECRET_KEY,
        algorithm=settings.ACCESS_TOKEN_ALGORITHM,
    )

    response = await client.get("/api/auth/me", headers=_bearer(token))

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_non_numeric_subject_is_401(client):
    settings = get_settings()
    token = jwt.encode(
        {"sub": "abc", "jti": "x", "iat": 0},
        settings.SECRET_KEY,
        algorithm=settings.ACCESS_TOKEN_ALGORITHM,
    )

    response = await client.get("/api/auth/me", headers=_bearer(token))

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_subject_outside_key_range_is_401(client):
    settings = get_settings()
    token = jwt.encode(
        {"sub": "100000000000000000000", "jti": "x", "iat": 0},
        settings.SECRET_KEY,
        algorithm=settings.ACCESS_TOKEN_ALGORITHM,
    )

    response = await client.get("/api/auth/me", headers=_bearer(token))

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_registry_row_is_401(client, db_session):
    user = await create_user(db_session)
    headers = await auth_headers_for(
        db_session, user, expires_at=datetime(2020, 1, 1, tzinfo=timezone.utc)
    )

    response = await client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_logout_revokes_current_token_only(client):
    await _register(client)
    first = (await _login(client)).json()["token"]
    second = (await _login(client)).json()["token"]

    response = await client.post("/api/auth/logout", headers=_bearer(first))

    assert response.status_code == 200
    assert response.json() == {"message": "Logout successful."}
    assert (await client.get("/api/auth/me", headers=_bearer(first))).status_code == 401
    assert (await client.get("/api/auth/me", headers=_bearer(second))).status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_logout_all_revokes_every_token(client):
    await _register(client)
    first = (await _login(client)).json()["token"]
    second = (await _login(client)).json()["token"]

    response = await client.post("/api/auth/logout-all", headers=_bearer(first))

    assert response.status_code == 200
    assert response.json() == {
        "message": "Successfully logged out from all devices.",
        "revoked": 2,
    }
    assert (await client.get("/api/auth/me", headers=_bearer(first))).status_code == 401
    assert (await client.get("/api/auth/me", headers=_bearer(second))).status_code == 401
