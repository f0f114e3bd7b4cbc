# This project was developed with assistance from AI tools.
"""Fixtures for functional tests.

The real app from ``src.main`` is a module singleton. ``_clean_overrides``
ensures dependency_overrides are cleared after every test so persona
configuration from one test never leaks into the next. The lifespan is not
run, so outbound clients are replaced here instead of initialised.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.main import app as real_app
from src.schemas.auth import UserContext

from .mock_db import Stores, configure_persona, configure_stores


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def stores(app):
    stores = Stores()
    configure_stores(app, stores)
    return stores


@pytest.fixture
def client(app, stores):
    """Unauthenticated client; bearer tokens are validated for real."""
    return TestClient(app)


@pytest.fixture
def make_client(app, stores):
    """Factory fixture: authenticate as a persona, return TestClient."""

    def _make(user: UserContext) -> TestClient:
        configure_persona(app, user)
        return TestClient(app)

    return _make


@pytest.fixture
def outbound(push_dispatcher):
    """Replace email, gateway and shielded persistence with recorders."""
    email = MagicMock()
    email.send_otp = AsyncMock()
    daraja = MagicMock()
    daraja.stk_push = AsyncMock()
    persisted = AsyncMock()
    persisted.add = MagicMock()
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = persisted

    patchers = [
        patch("src.services.identity.get_email_service", return_value=email),
        patch("src.services.payment.get_daraja_client", return_value=daraja),
        patch("src.services.payment.SessionLocal", factory),
    ]
    for p in patchers:
        p.start()
    yield SimpleNamespace(email=email, daraja=daraja, persisted=persisted, push=push_dispatcher)
    for p in patchers:
        p.stop()
