"""Async database engine and session factory."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from src.db.base import Base
from src.settings import get_settings

_async_engine: Optional[AsyncEngine] = None


def get_async_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Get or create the async database engine.

    An explicit ``database_url`` always builds a fresh engine; otherwise
    the shared engine for ``settings.database_url`` is returned.
    """
    global _async_engine
    if database_url is not None:
        return create_async_engine(database_url, pool_pre_ping=True)
    if _async_engine is None:
        settings = get_settings()
        _async_engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    return _async_engine


def get_async_session_factory(engine: Optional[AsyncEngine] = None):
    return async_sessionmaker(bind=engine or get_async_engine(), expire_on_commit=False)


async def create_tables(engine: Optional[AsyncEngine] = None) -> None:
    """Create all tables (demo and tests; deployments run the migrations)."""
    async with (engine or get_async_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the shared engine."""
    global _async_engine
    if _async_engine is not None:
        await _async_engine.dispose()
        _async_engine = None


# Convenience alias
AsyncSessionLocal = get_async_session_factory
