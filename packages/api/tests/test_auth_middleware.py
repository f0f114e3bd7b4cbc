# This project was developed with assistance from AI tools.
"""Tests for the bearer token dependency."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import jwt
from db import get_db
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.core.auth import issue_access_token
from src.core.config import settings
from src.middleware.auth import CurrentUser

from .factories import CUSTOMER_A, make_user


def _app(user_row):
    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id, "customer_number": user.customer_number}

    async def fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = fake_db
    patcher = patch("src.middleware.auth.get_user", AsyncMock(return_value=user_row))
    return app, patcher


def _get(app, patcher, headers=None):
    with patcher:
        return TestClient(app).get("/me", headers=headers or {})


def test_missing_token_returns_401():
    app, patcher = _app(make_user())
    resp = _get(app, patcher)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Missing authentication token"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_non_bearer_scheme_is_treated_as_missing():
    app, patcher = _app(make_user())
    resp = _get(app, patcher, {"Authorization": "Basic abc"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Missing authentication token"


def test_valid_token_yields_user_context():
    app, patcher = _app(make_user(id=5))
    token = issue_access_token(5)
    resp = _get(app, patcher, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"user_id": 5, "customer_number": CUSTOMER_A}


def test_garbage_token_is_invalid():
    app, patcher = _app(make_user())
    resp = _get(app, patcher, {"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_expired_token_is_reported(monkeypatch):
    monkeypatch.setattr(settings, "ACCESS_TOKEN_TTL_MINUTES", 1)
    app, patcher = _app(make_user())
    token = issue_access_token(1, now=datetime.now(UTC) - timedelta(minutes=10))
    resp = _get(app, patcher, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired"


def test_token_for_deleted_user_is_invalid():
    app, patcher = _app(None)
    token = issue_access_token(1)
    resp = _get(app, patcher, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_non_integer_user_id_claim_is_invalid():
    app, patcher = _app(make_user())
    token = jwt.encode({"user_id": "abc", "iat": 1.0}, settings.JWT_SECRET, algorithm="HS256")
    resp = _get(app, patcher, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_token_issued_before_logout_is_revoked():
    issued = datetime.now(UTC) - timedelta(minutes=5)
    token = issue_access_token(1, now=issued)
    app, patcher = _app(make_user(last_logout_at=issued + timedelta(minutes=1)))
    resp = _get(app, patcher, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has been revoked"


def test_token_issued_after_logout_is_accepted():
    logout_at = datetime.now(UTC) - timedelta(minutes=5)
    token = issue_access_token(1, now=logout_at + timedelta(seconds=1))
    app, patcher = _app(make_user(last_logout_at=logout_at))
    resp = _get(app, patcher, {"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
