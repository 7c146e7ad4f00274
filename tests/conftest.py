"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory UserRepository for service and route tests
- A broadcast hub and event/user factories
- A PostgreSQL connection pool for integration tests (skipped when no
  database is reachable)
"""

import threading
import uuid
from collections.abc import Callable, Generator
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from invito.adapters.broadcast.hub import BroadcastHub
from invito.adapters.repository.postgres import run_migrations
from invito.config.settings import get_settings
from invito.domain.exceptions import DuplicateKey
from invito.domain.models import RegistrationEvent, User


class InMemoryUserRepository:
    """
    UserRepository test double backed by a dict.

    Mirrors the store's unique constraints and raises the same domain
    errors as the PostgreSQL adapter. Set ``fail_with`` to make every
    call raise that exception, or ``increment_error`` to fail credits only.
    """

    def __init__(self) -> None:
        self.users: dict[uuid.UUID, User] = {}
        self.fail_with: Exception | None = None
        self.increment_error: Exception | None = None
        self._lock = threading.Lock()
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _check_unique(self, candidate: User) -> None:
        for user in self.users.values():
            if user.id == candidate.id:
                continue
            for column in ("user_name", "email", "ref_code"):
                if getattr(user, column) == getattr(candidate, column):
                    raise DuplicateKey(f"users_{column}_key")

    def find_by_ref_code(self, code: str) -> User | None:
        self._check()
        with self._lock:
            return next((u for u in self.users.values() if u.ref_code == code), None)

    def increment_referral_count(self, user_id: uuid.UUID) -> bool:
        self._check()
        if self.increment_error is not None:
            raise self.increment_error
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return False
            self.users[user_id] = replace(user, added_by_ref_code=user.added_by_ref_code + 1)
            return True

    def insert_user(self, user_name: str, email: str, ref_code: str) -> User:
        self._check()
        with self._lock:
            self._clock += timedelta(seconds=1)
            user = User(
                id=uuid.uuid4(),
                user_name=user_name,
                email=email,
                ref_code=ref_code,
                added_by_ref_code=0,
                created_at=self._clock,
                updated_at=self._clock,
            )
            self._check_unique(user)
            self.users[user.id] = user
            return user

    def list_users(self, limit: int, offset: int) -> list[User]:
        self._check()
        with self._lock:
            ordered = sorted(self.users.values(), key=lambda u: (u.created_at, u.id))
            return ordered[offset : offset + limit]

    def get_user(self, user_id: uuid.UUID) -> User | None:
        self._check()
        return self.users.get(user_id)

    def update_user(
        self, user_id: uuid.UUID, user_name: str | None, email: str | None
    ) -> User | None:
        self._check()
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return None
            updated = replace(
                user,
                user_name=user_name if user_name is not None else user.user_name,
                email=email if email is not None else user.email,
                updated_at=user.updated_at + timedelta(seconds=1),
            )
            self._check_unique(updated)
            self.users[user_id] = updated
            return updated

    def delete_user(self, user_id: uuid.UUID) -> bool:
        self._check()
        with self._lock:
            return self.users.pop(user_id, None) is not None


@pytest.fixture
def repository() -> InMemoryUserRepository:
    """Fresh in-memory repository for each test."""
    return InMemoryUserRepository()


@pytest.fixture
def hub() -> Generator[BroadcastHub, None, None]:
    """Broadcast hub with a small per-subscriber capacity."""
    hub = BroadcastHub(capacity=10)
    yield hub
    hub.close()


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Factory for standalone User values."""

    def factory(user_name: str = "ann", **overrides: object) -> User:
        fields = {
            "id": uuid.uuid4(),
            "user_name": user_name,
            "email": f"{user_name}@example.com",
            "ref_code": f"{user_name[:3]}1f2a",
            "added_by_ref_code": 0,
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return User(**fields)

    return factory


@pytest.fixture
def make_event(make_user: Callable[..., User]) -> Callable[[str], RegistrationEvent]:
    """Factory for RegistrationEvent values keyed by user name."""

    def factory(user_name: str = "ann") -> RegistrationEvent:
        return RegistrationEvent(user=make_user(user_name))

    return factory


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool for tests that need PostgreSQL.

    Skips the requesting test when the configured database is unreachable.
    Migrations are applied once per session.
    """
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_users(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty the users table before a test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM users")
        conn.commit()
    yield
