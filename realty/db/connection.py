from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from realty.settings import AppSettings

logger = logging.getLogger(__name__)


def create_engine(settings: AppSettings) -> AsyncEngine:
    """Create the async SQLAlchemy engine for the configured database.

    PostgreSQL gets a warm connection pool; SQLite runs with the driver
    defaults since aiosqlite serialises access to the file anyway.
    """

    url = settings.resolved_database_url
    if settings.database_type == "postgresql":
        engine = create_async_engine(
            url,
            echo=False,
            pool_size=10,  # Maintain 10 warm connections
            max_overflow=20,  # Allow up to 30 total connections
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=1800,  # Recycle connections every 30 min
            pool_timeout=30,
        )
    else:
        engine = create_async_engine(url, echo=False)

    from realty.monitoring import setup_query_monitoring

    setup_query_monitoring(
        engine,
        slow_query_threshold=settings.slow_query_threshold,
        log_pool_stats=False,
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table that does not exist yet.

    Used for SQLite deployments and tests; PostgreSQL is managed by Alembic.
    """

    from realty.db.models import Base

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session that commits on success and rolls back on error."""

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_context(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Context-manager flavour of :func:`session_scope` for scripts and warmup."""

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
