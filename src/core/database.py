"""Async SQLAlchemy engine and session factory singletons."""

import logging
from functools import lru_cache
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.core.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _engine_options() -> dict[str, Any]:
    settings = get_settings()
    if settings.is_sqlite:
        # In-memory SQLite only exists on a single connection
        return {"poolclass": StaticPool, "echo": settings.database_echo}
    return {
        "pool_size": settings.database_pool_size,
        "pool_recycle": settings.database_pool_recycle,
        "pool_pre_ping": True,
        "echo": settings.database_echo,
    }


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the process-wide async engine (and its connection pool).

    Returns:
        AsyncEngine: Engine bound to the configured database URL.
    """
    settings = get_settings()
    return create_async_engine(settings.database_url, **_engine_options())


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the cached session factory bound to the shared engine.

    Returns:
        async_sessionmaker: Factory producing one AsyncSession per unit of work.
    """
    return async_sessionmaker(get_engine(), expire_on_commit=False, autoflush=False)


async def create_schema() -> None:
    """Create any missing tables. Intended for local development and tests."""
    # Register every model on Base.metadata
    import src.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def dispose_engine() -> None:
    """Close pooled connections if the engine was ever created."""
    if get_engine.cache_info().currsize == 0:
        return
    await get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()


async def check_database_connection() -> dict[str, Any]:
    """Check if database connection is healthy.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}


async def check_schema() -> dict[str, Any]:
    """Check that every table the fulfillment pipeline writes to exists.

    Returns:
        dict: 'healthy' boolean and, when tables are missing, an 'error' naming them.
    """
    import src.models  # noqa: F401

    try:
        async with get_engine().connect() as conn:
            existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    except Exception as e:
        return {"healthy": False, "error": str(e)}

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        return {"healthy": False, "error": f"Missing tables: {', '.join(missing)}"}
    return {"healthy": True}
