# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container holds the portal, CRM and ledger tables in one
database (their table names never collide). Each test gets fresh tables.
"""

import pytest
import pytest_asyncio
from db import Base, CrmBase, LedgerBase
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

pytestmark = pytest.mark.integration

_METADATA = (Base.metadata, CrmBase.metadata, LedgerBase.metadata)


@pytest.fixture(scope="session")
def pg_container():
    with PostgresContainer(image="postgres:16", username="test", password="test", dbname="test") as pg:
        yield pg


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest_asyncio.fixture
async def engine(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    async with engine.begin() as conn:
        for metadata in _METADATA:
            await conn.run_sync(metadata.drop_all)
            await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
