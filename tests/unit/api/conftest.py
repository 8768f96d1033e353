"""
Fixtures for API router tests.

The app is built with create_app() in production auth mode. Token validation
is replaced by a lookup table (tests.fixtures.api_auth) so tests pick a role
by sending its token, and the engine dependency is overridden with the
in-memory engine.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from tests.fixtures.api_auth import TableValidator


@pytest.fixture
def client(engine, monkeypatch) -> Generator[TestClient, None, None]:
    """TestClient over the real app wired to the in-memory engine."""
    from api.dependencies import get_engine
    from api.main import create_app
    from api.settings import get_settings

    monkeypatch.setenv("AUTH_MODE", "production")
    monkeypatch.setenv("SKIP_PB_AUTH", "true")
    # The middleware stack is built on the first request, so keep this for the whole test
    monkeypatch.setattr("ticketing.auth_middleware.PocketBaseTokenValidator", TableValidator)
    get_settings.cache_clear()

    app = create_app()
    app.dependency_overrides[get_engine] = lambda: engine

    yield TestClient(app)

    app.dependency_overrides.clear()
    get_settings.cache_clear()
