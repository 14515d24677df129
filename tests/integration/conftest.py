"""
Shared fixtures for integration tests.

Requires PostgreSQL to be running (via docker-compose). Run with
``pytest -m integration``.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresTenantRepository, run_migrations
from src.config.settings import get_settings


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool and apply migrations."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def pg_repository(pool: ConnectionPool) -> PostgresTenantRepository:
    return PostgresTenantRepository(pool)


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean servers table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM servers")
        conn.commit()
    yield


@pytest.fixture
def count_servers(pool: ConnectionPool):
    """Count rows in servers, optionally filtered by column equality."""

    def count(**where: str) -> int:
        sql = "SELECT COUNT(*) FROM servers"
        params: list[str] = []
        if where:
            sql += " WHERE " + " AND ".join(f"{column} = %s" for column in where)
            params = list(where.values())
        with pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            return cursor.fetchone()[0]

    return count
