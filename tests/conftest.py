"""
tests/conftest.py -- Shared test fixtures for the auth service.

This module provides:
  - FakeClock / FakeStore / FakeHasher: in-memory collaborators for unit tests
    of TokenService, AuthService and AccountService
  - _make_test_store(): isolated in-memory UserStore for integration tests
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient with a seeded user and a valid bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any api/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from api.main import app
from auth.accounts import AccountService
from auth.models import User
from auth.passwords import BcryptHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789abcdef"
SEED_EMAIL = "seed@example.com"
SEED_PASSWORD = "seedpass123"

# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that only moves when a test tells it to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


class FakeHasher:
    """Reversible stand-in for bcrypt. Records every call for assertions."""

    dummy_hash = "fake$__dummy__"

    def __init__(self) -> None:
        self.hash_calls: list[str] = []
        self.verify_calls: list[tuple[str, str]] = []

    def hash(self, plain: str) -> str:
        self.hash_calls.append(plain)
        return f"fake${plain[::-1]}"

    def verify(self, plain: str, hashed: str) -> bool:
        self.verify_calls.append((plain, hashed))
        return hashed == f"fake${plain[::-1]}"


class FakeStore:
    """Dict-backed CredentialStore. Enforces email uniqueness like the SQL table.

    race_on_create simulates a concurrent insert landing between the
    exists_by_email() check and create_user().
    """

    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self.calls: list[str] = []
        self.race_on_create = False
        self._next_id = 1

    def create_user(self, user: User) -> int:
        self.calls.append("create_user")
        if self.race_on_create or any(u.email == user.email for u in self.users.values()):
            raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))
        user_id = self._next_id
        self._next_id += 1
        self.users[user_id] = replace(user, id=user_id, created_at="2024-01-01T00:00:00+00:00")
        return user_id

    def get_by_id(self, user_id: int) -> User | None:
        self.calls.append("get_by_id")
        user = self.users.get(user_id)
        return replace(user) if user is not None else None

    def get_by_email(self, email: str) -> User | None:
        self.calls.append("get_by_email")
        for user in self.users.values():
            if user.email == email:
                return replace(user)
        return None

    def exists_by_email(self, email: str) -> bool:
        self.calls.append("exists_by_email")
        return any(u.email == email for u in self.users.values())

    def list_users(self) -> list[User]:
        self.calls.append("list_users")
        return [replace(u) for _, u in sorted(self.users.items())]

    def update_user(self, user_id: int, **fields) -> bool:
        self.calls.append("update_user")
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(self.users[user_id], **fields)
        return True

    def delete_user(self, user_id: int) -> bool:
        self.calls.append("delete_user")
        return self.users.pop(user_id, None) is not None


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(TEST_SECRET, expire_seconds=3600, clock=clock)


@pytest.fixture
def auth_service(fake_store: FakeStore, fake_hasher: FakeHasher, token_service: TokenService) -> AuthService:
    return AuthService(fake_store, fake_hasher, token_service)


@pytest.fixture
def account_service(fake_store: FakeStore, fake_hasher: FakeHasher) -> AccountService:
    return AccountService(fake_store, fake_hasher)


# ---------------------------------------------------------------------------
# Integration helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'health').
    """
    return UserStore(db_url=f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: UserStore, tokens: TokenService, hasher: BcryptHasher):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-built test collaborators into app.state so TestClient routes see
    the isolated test DB and a known signing key.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.token_service = tokens
        app.state.auth_service = AuthService(store, hasher, tokens)
        app.state.account_service = AccountService(store, hasher)
        yield

    return test_lifespan


def _client_for(db_suffix: str) -> Generator[tuple[TestClient, str, int], None, None]:
    store = _make_test_store(db_suffix)
    # Minimum cost factor keeps the suite fast; the algorithm is unchanged.
    hasher = BcryptHasher(rounds=4)
    tokens = TokenService(TEST_SECRET, expire_seconds=3600)

    uid = store.create_user(
        User(
            email=SEED_EMAIL,
            first_name="Seed",
            last_name="User",
            hashed_password=hasher.hash(SEED_PASSWORD),
        )
    )
    token = tokens.issue(store.get_by_id(uid))

    app.router.lifespan_context = _patch_lifespan(store, tokens, hasher)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    store.close()


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The seeded account is seed@example.com / seedpass123; token is a valid
    bearer token for it. Each test module gets its own database.
    """
    yield from _client_for(request.module.__name__.rsplit(".", 1)[-1])
