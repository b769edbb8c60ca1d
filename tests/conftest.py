"""
tests/conftest.py -- Shared test fixtures for CommentBoard tests.

This module provides:
  - store: a fresh in-memory SQLDataStore per test
  - users / comments: models over that store, with a cheap bcrypt cost
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient over the real app with an isolated store

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
TestClient fixture because route handlers run in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread.

DEBUG, ALLOWED_HOSTS, and BCRYPT_ROUNDS must be set before any app import so
get_settings() builds a dev-mode, test-friendly Settings singleton.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any core/api import (get_settings() is cached).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver"]')
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app, wire_services
from auth.hashing import BcryptHasher
from auth.users import UserModel
from content.comments import ContentModel
from store.sql import SQLDataStore

# Lowest cost bcrypt accepts. Keeps hashing fast without faking the hasher.
TEST_ROUNDS = 4


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[SQLDataStore, None, None]:
    """Fresh shared-memory store, visible from thread-pool workers as well."""
    s = _make_test_store()
    yield s
    s.close()


@pytest.fixture
def hasher() -> BcryptHasher:
    return BcryptHasher(rounds=TEST_ROUNDS)


@pytest.fixture
def users(store: SQLDataStore, hasher: BcryptHasher) -> UserModel:
    return UserModel(store, hasher)


@pytest.fixture
def comments(store: SQLDataStore) -> ContentModel:
    return ContentModel(store)


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


def _make_test_store() -> SQLDataStore:
    """Create an isolated named shared-memory SQLite store.

    The uuid suffix keeps fixtures from different test modules apart.
    """
    name = f"test_commentboard_{uuid.uuid4().hex}"
    return SQLDataStore(f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(datastore: SQLDataStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, datastore, hasher=BcryptHasher(rounds=TEST_ROUNDS))
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app backed by a fresh store.

    Function-scoped: each test starts with an empty store and an empty
    cookie jar. Rate limiting is switched off; the limiter has its own
    counter store that would otherwise leak between tests.
    """
    datastore = _make_test_store()
    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(datastore)
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    limiter.enabled = True
    app.router.lifespan_context = original_lifespan
    datastore.close()

