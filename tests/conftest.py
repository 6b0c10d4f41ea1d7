"""
tests/conftest.py -- Shared test fixtures for authcore.

This module provides:
  - store / token_service / account_service / auth_service: the real core
    over a private in-memory SQLite database
  - api_client: TestClient whose lifespan is patched to use an isolated store
  - register: fixture returning a helper that registers an account over HTTP

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. A uuid suffix keeps every fixture instance isolated.

The DEBUG env var must be set before any api/core import so get_settings()
auto-generates the signing secrets instead of raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate JWT secrets in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app, build_auth_service
from auth.accounts import AccountService
from auth.service import AuthService
from auth.store import AccountStore
from auth.tokens import TokenService

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_expire_seconds=900,
        refresh_expire_seconds=604800,
    )


@pytest.fixture
def account_service(store: AccountStore) -> AccountService:
    return AccountService(store)


@pytest.fixture
def auth_service(account_service: AccountService, token_service: TokenService) -> AuthService:
    return AuthService(account_service, token_service)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(store: AccountStore):
    """Return an async context manager that replaces the real lifespan.

    Wires a pre-created test store into app.state so TestClient routes see an
    isolated database rather than the default SQLite file.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.account_store = store
        app.state.auth_service = build_auth_service(store)
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient backed by a fresh shared-memory account store."""
    db_url = f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    api_store = AccountStore(db_url=db_url)

    app.router.lifespan_context = _patch_lifespan(api_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    api_store.close()


@pytest.fixture
def register(api_client: TestClient):
    """Return a helper that registers over HTTP and returns the token pair body."""

    def _register(email: str, password: str = "pw", name: str | None = None) -> dict:
        body = {"email": email, "password": password}
        if name is not None:
            body["name"] = name
        resp = api_client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register
