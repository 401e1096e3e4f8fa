"""Async database engine, sessions and the declarative base.

The engine is a lazily created, module-scoped singleton so that repeated
imports (reloads in development, multiple routers) share one connection pool.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every model."""


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
_connected: bool = False


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool options suited to the backend."""
    if database_url.startswith("sqlite"):
        # In-memory SQLite must share a single connection between sessions
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine, _session_factory
    if _engine is None:
        _engine = create_engine_for_url(settings.database_url, echo=settings.db_echo)
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the shared engine."""
    get_engine()
    assert _session_factory is not None
    return _session_factory


def is_connected() -> bool:
    return _connected


async def connect_db() -> AsyncEngine:
    """Verify connectivity once and make sure every model is registered.

    Subsequent calls reuse the existing engine without reconnecting.
    """
    global _connected
    from app.models.registry import register_models

    engine = get_engine()
    if _connected:
        logger.debug("Using existing database connection")
        register_models()
        return engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        _connected = False
        logger.exception("Database connection failed")
        raise

    _connected = True
    models = register_models()
    logger.info(f"Database connected; registered models: {', '.join(models)}")
    return engine


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session that commits on success."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Session context manager for scripts and background work."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables (development only; production uses Alembic)."""
    from app.models.registry import register_models

    register_models()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def close_db() -> None:
    """Dispose of the engine and reset the connection state."""
    global _engine, _session_factory, _connected
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
    _connected = False
