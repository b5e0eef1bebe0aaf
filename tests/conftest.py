"""
tests/conftest.py -- Shared test fixtures for ReqRes Bridge.

This module provides:
  - make_store(): isolated in-memory IdentityStore per test
  - test_settings: Settings pointing at a fake provider URL
  - store: an empty IdentityStore
  - seeded_store: a store with an admin (id 1), a user (id 2) and posts
  - api_client: TestClient wired to a fresh store and test_settings
  - lenient_client: same wiring, unhandled exceptions rendered as 500s

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool and the stats
reads fan out to worker threads. Plain :memory: DBs are per-connection and
would present a blank schema to each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

No test talks to the real identity provider: gateway functions are patched
where they are imported (auth.login.*, users.service.*).
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from core.config import Settings
from core.models import ROLE_ADMIN, ROLE_USER
from identity.models import Post, User
from identity.store import IdentityStore

PROVIDER_URL = "https://reqres.test/api"
PROVIDER_KEY = "test-api-key"

# Rate limits are exercised by slowapi's own tests; counters shared across
# the whole session would otherwise make login tests order-dependent.
limiter.enabled = False


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_store() -> IdentityStore:
    """Create an isolated named shared-memory SQLite store.

    The random suffix keeps every store separate even though all of them
    live in the same process.
    """
    name = f"test_identity_{uuid.uuid4().hex}"
    return IdentityStore(db_url=f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true")


def seed(store: IdentityStore) -> None:
    """Admin 1 (George Bluth) with one post, user 2 (Janet Weaver) with two."""
    store.create_user(
        User(
            id=1,
            email="george.bluth@reqres.in",
            first_name="George",
            last_name="Bluth",
            avatar="https://reqres.in/img/faces/1-image.jpg",
            role=ROLE_ADMIN,
        )
    )
    store.create_user(
        User(
            id=2,
            email="janet.weaver@reqres.in",
            first_name="Janet",
            last_name="Weaver",
            avatar="https://reqres.in/img/faces/2-image.jpg",
            role=ROLE_USER,
        )
    )
    store.create_post(Post(title="Admin notes", content="Welcome to the board.", author_user_id=1))
    store.create_post(Post(title="Janet one", content="First post by Janet.", author_user_id=2))
    store.create_post(Post(title="Janet two", content="Second post by Janet.", author_user_id=2))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    return Settings(reqres_url=PROVIDER_URL, reqres_api_key=PROVIDER_KEY, reqres_timeout=5)


@pytest.fixture
def store() -> Generator[IdentityStore, None, None]:
    s = make_store()
    yield s
    s.close()


@pytest.fixture
def seeded_store(store: IdentityStore) -> IdentityStore:
    seed(store)
    return store


def _patch_lifespan(store: IdentityStore, settings: Settings):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and settings into app.state so routes see an
    isolated database and a fake provider URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        app.state.settings = settings
        yield

    return test_lifespan


@pytest.fixture
def api_client(
    seeded_store: IdentityStore, test_settings: Settings
) -> Generator[tuple[TestClient, IdentityStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers, middleware and exception handlers.
    """
    app.router.lifespan_context = _patch_lifespan(seeded_store, test_settings)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, seeded_store


@pytest.fixture
def lenient_client(
    seeded_store: IdentityStore, test_settings: Settings
) -> Generator[TestClient, None, None]:
    """Like api_client, but unhandled exceptions become 500 responses instead of test errors."""
    app.router.lifespan_context = _patch_lifespan(seeded_store, test_settings)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
