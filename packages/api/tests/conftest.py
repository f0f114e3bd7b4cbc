# This project was developed with assistance from AI tools.
"""Shared test setup.

Settings are read at import time and JWT_SECRET has no default, so a test
secret is put in the environment before any ``src`` module is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

import pytest  # noqa: E402


@pytest.fixture
def push_dispatcher(monkeypatch):
    """Replace the push singleton with a recorder that always succeeds."""
    from unittest.mock import AsyncMock, MagicMock

    dispatcher = MagicMock()
    dispatcher.send = AsyncMock(return_value=True)
    monkeypatch.setattr("src.services.notification.get_push_dispatcher", lambda: dispatcher)
    return dispatcher
