"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for concurrency tests against
PostgreSQL. The session ``pool`` fixture skips when no database is reachable.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from invito.adapters.repository.postgres import PostgresUserRepository


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresUserRepository:
    """Create repository instance for each test."""
    return PostgresUserRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(clean_users: None) -> Generator[None, None, None]:
    """Clean users table before each test."""
    yield
