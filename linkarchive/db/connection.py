"""Async engine and session factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from linkarchive.config import settings
from linkarchive.db.models import Base

logger = logging.getLogger(__name__)


def create_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """Create the async engine; pool sizing applies to server databases only."""
    url = database_url or settings.DATABASE_URL
    kwargs = {"echo": echo}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables from ORM metadata (Alembic handles real migrations)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.debug("Database engine disposed")


@asynccontextmanager
async def get_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session that commits on success and rolls back on error."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
