"""
Integration test configuration with testcontainers.

This module provides a session-scoped PostgreSQL container and per-test
fixtures that build the lobby schema on it:
- postgres_container: PostgreSQL 16, started once per test session
- pg_engine: async engine with a freshly created schema per test
- pg_store: PostgresSessionStore on that engine

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(pg_store: PostgresSessionStore) -> None:
        ...

Note: Docker must be running for these fixtures to work. Without it the
tests are skipped.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from lobbysync.infrastructure.adapters.persistence import PostgresSessionStore
from lobbysync.infrastructure.adapters.persistence.schema import (
    create_schema,
    drop_schema,
)

# Change-feed poll interval for tests
POLL_INTERVAL_SECONDS = 0.05


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    The container is started once and reused across all integration tests.
    """
    try:
        container = PostgresContainer("postgres:16-alpine")
        container.start()
    except Exception as exc:
        pytest.skip(f"Docker is not available: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get async-compatible PostgreSQL connection URL.

    testcontainers returns a psycopg2 URL by default; convert to asyncpg.

    Returns:
        postgresql+asyncpg:// URL string
    """
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def pg_engine(postgres_async_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test engine with the lobby schema dropped and recreated."""
    engine = create_async_engine(postgres_async_url, echo=False)
    await drop_schema(engine)
    await create_schema(engine)

    yield engine

    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture
def pg_store(pg_engine: AsyncEngine) -> PostgresSessionStore:
    """Session store gateway on the per-test schema."""
    factory = async_sessionmaker(
        bind=pg_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return PostgresSessionStore(factory, poll_interval_seconds=POLL_INTERVAL_SECONDS)
