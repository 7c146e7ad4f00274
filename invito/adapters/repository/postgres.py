"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Concurrency Design:
------------------
The referral credit is a single ``UPDATE ... SET added_by_ref_code =
added_by_ref_code + 1`` statement. The row is never read and written back
from Python, so concurrent registrations citing the same referral code
cannot lose increments.

Uniqueness of user_name, email and ref_code is enforced by UNIQUE
constraints. Violations are classified from psycopg's UniqueViolation
(SQLSTATE 23505) and its constraint name, never by matching error text.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import UUID

import psycopg
from psycopg.rows import class_row
from psycopg_pool import ConnectionPool

from invito.domain.exceptions import DuplicateKey, StoreError
from invito.domain.models import User

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, user_name, email, ref_code, added_by_ref_code, created_at, updated_at"


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Re-raise psycopg failures as domain store errors."""
    try:
        yield
    except psycopg.errors.UniqueViolation as e:
        raise DuplicateKey(e.diag.constraint_name) from e
    except psycopg.Error as e:
        raise StoreError(str(e)) from e


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_ref_code(self, code: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE ref_code = %s"

        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(User)) as cursor:
                cursor.execute(sql, (code,))
                return cursor.fetchone()

    def increment_referral_count(self, user_id: UUID) -> bool:
        """
        Credit one signup to a referrer.

        Returns:
            True if the referrer row was updated, False if it is gone
        """
        sql = """
            UPDATE users
            SET added_by_ref_code = added_by_ref_code + 1,
                updated_at = NOW()
            WHERE id = %s
        """

        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(sql, (user_id,))
                conn.commit()
                return cursor.rowcount == 1

    def insert_user(self, user_name: str, email: str, ref_code: str) -> User:
        """
        Insert a new user with a zero signup counter.

        Raises:
            DuplicateKey: If user_name, email or ref_code is already taken
            StoreError: On any other database failure
        """
        sql = f"""
            INSERT INTO users (user_name, email, ref_code, added_by_ref_code)
            VALUES (%s, %s, %s, 0)
            RETURNING {_USER_COLUMNS}
        """

        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(User)) as cursor:
                cursor.execute(sql, (user_name, email, ref_code))
                user = cursor.fetchone()
                conn.commit()
                return user

    def list_users(self, limit: int, offset: int) -> list[User]:
        sql = f"""
            SELECT {_USER_COLUMNS} FROM users
            ORDER BY created_at, id
            LIMIT %s OFFSET %s
        """

        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(User)) as cursor:
                cursor.execute(sql, (limit, offset))
                return cursor.fetchall()

    def get_user(self, user_id: UUID) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"

        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(User)) as cursor:
                cursor.execute(sql, (user_id,))
                return cursor.fetchone()

    def update_user(
        self, user_id: UUID, user_name: str | None, email: str | None
    ) -> User | None:
        """
        Merge new values over the stored row in one statement.

        NULL parameters keep the current column value (COALESCE), so
        there is no read-then-write window.
        """
        sql = f"""
            UPDATE users
            SET user_name = COALESCE(%s, user_name),
                email = COALESCE(%s, email),
                updated_at = NOW()
            WHERE id = %s
            RETURNING {_USER_COLUMNS}
        """

        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(User)) as cursor:
                cursor.execute(sql, (user_name, email, user_id))
                user = cursor.fetchone()
                conn.commit()
                return user

    def delete_user(self, user_id: UUID) -> bool:
        with _translate_errors(), self._pool.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("DELETE FROM users WHERE id = %s", (user_id,))
                conn.commit()
                return cursor.rowcount == 1


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: invito/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
