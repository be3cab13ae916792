from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from vacation_scheduler.config import get_settings
from vacation_scheduler.exceptions import StoreError

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the singleton async engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the singleton async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def commit_or_rollback(session: AsyncSession, operation: str) -> None:
    """Commit the unit of work, rolling everything back if the store rejects it.

    A rollback expires every instance in the session, so in-memory pool
    counters and range states revert to what the store last confirmed.
    """
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        logger.exception("Store rejected %s", operation)
        await session.rollback()
        raise StoreError(f"Could not persist {operation}") from exc


async def flush_or_rollback(session: AsyncSession, operation: str) -> None:
    """Flush pending changes, rolling back and raising StoreError if the store rejects them."""
    try:
        await session.flush()
    except SQLAlchemyError as exc:
        logger.exception("Store rejected %s", operation)
        await session.rollback()
        raise StoreError(f"Could not persist {operation}") from exc


async def dispose_engine() -> None:
    """Dispose the engine and reset singletons. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
