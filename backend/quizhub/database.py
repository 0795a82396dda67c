"""
Database configuration and session management for QuizHub.

Uses SQLAlchemy's asyncio extension; in production the URL points at
PostgreSQL through the asyncpg driver.
"""

from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import settings
from .logging_config import get_logger

logger = get_logger("quizhub.database")


class Base(DeclarativeBase):
    pass


# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def configure_database(database_url: Optional[str] = None, **engine_kwargs) -> AsyncEngine:
    """
    Create the engine and session factory, replacing any previous ones.

    Args:
        database_url: SQLAlchemy async URL, defaults to DATABASE_URL
        **engine_kwargs: Extra arguments for create_async_engine

    Returns:
        AsyncEngine: The configured engine
    """
    global _engine, _session_factory

    url = database_url or settings.database_url
    if url.startswith("postgresql") and not engine_kwargs:
        engine_kwargs = {
            "pool_size": settings.database_pool_min,
            "max_overflow": settings.database_pool_max - settings.database_pool_min,
            "pool_pre_ping": True,
        }

    _engine = create_async_engine(url, echo=settings.database_echo, **engine_kwargs)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)

    logger.info("Database engine configured", dialect=_engine.dialect.name)
    return _engine


def get_engine() -> AsyncEngine:
    """Get the engine, creating it from settings on first use."""
    if _engine is None:
        configure_database()
    return _engine


def get_session_factory() -> async_sessionmaker:
    if _session_factory is None:
        configure_database()
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency yielding one session per request.

    Services own their commit boundaries; anything left uncommitted is
    rolled back when the session closes.
    """
    async with get_session_factory()() as session:
        yield session


async def create_all() -> None:
    """Create every table known to the models."""
    # Register the models on Base.metadata
    from . import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all() -> None:
    from . import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_database() -> None:
    """Dispose the engine and its connection pool."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
