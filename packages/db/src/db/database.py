# This project was developed with assistance from AI tools.
"""Async engines, session factories and FastAPI dependencies.

Three stores are reachable from the API:

- portal: tables owned and migrated by this service
- crm: customer master data and installment schedules
- ledger: posted receipts and the project catalogue

Each store gets its own declarative base so metadata for external schemas
never leaks into Alembic autogenerate runs against the portal database.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import db_settings

logger = logging.getLogger(__name__)

Base = declarative_base()
CrmBase = declarative_base()
LedgerBase = declarative_base()


def _make_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=db_settings.SQL_ECHO,
        pool_size=db_settings.POOL_SIZE,
        pool_pre_ping=True,
    )


engine = _make_engine(db_settings.PORTAL_DATABASE_URL)
crm_engine = _make_engine(db_settings.CRM_DATABASE_URL)
ledger_engine = _make_engine(db_settings.LEDGER_DATABASE_URL)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
CrmSessionLocal = async_sessionmaker(crm_engine, class_=AsyncSession, expire_on_commit=False)
LedgerSessionLocal = async_sessionmaker(ledger_engine, class_=AsyncSession, expire_on_commit=False)


class DatabaseService:
    """Connectivity checks and shutdown for a single engine."""

    def __init__(self, engine: AsyncEngine, name: str = "portal"):
        self.engine = engine
        self.name = name

    async def health_check(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("Database health check failed (%s)", self.name)
            return False

    async def close(self) -> None:
        await self.engine.dispose()


db_service = DatabaseService(engine=engine, name="portal")
crm_db_service = DatabaseService(engine=crm_engine, name="crm")
ledger_db_service = DatabaseService(engine=ledger_engine, name="ledger")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a portal session."""
    async with SessionLocal() as session:
        yield session


async def get_crm_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a CRM session."""
    async with CrmSessionLocal() as session:
        yield session


async def get_ledger_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a ledger session."""
    async with LedgerSessionLocal() as session:
        yield session


async def get_db_service() -> list[DatabaseService]:
    """FastAPI dependency returning the services for every configured store."""
    return [db_service, crm_db_service, ledger_db_service]
