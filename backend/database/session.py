"""
Database session context managers.
Provides reusable database session management for non-FastAPI contexts.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config import settings
from database.base import Base

# Async engine and session factory
_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself on SQLite so SAVEPOINTs nest properly.

    The sqlite3 driver otherwise delays BEGIN until the first write, which
    breaks the per-wager savepoints used during settlement.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _get_async_engine() -> AsyncEngine:
    """Get or create async engine."""
    global _async_engine
    if _async_engine is None:
        kwargs = {"pool_pre_ping": True}
        if not settings.database_url.startswith("sqlite"):
            kwargs.update(pool_size=5, max_overflow=10, pool_recycle=3600)
        _async_engine = create_async_engine(settings.database_url, **kwargs)
        if _async_engine.dialect.name == "sqlite":
            enable_sqlite_savepoints(_async_engine)
    return _async_engine


def _get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create async session factory."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            bind=_get_async_engine(),
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
    return _async_session_factory


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database sessions in CLI commands and jobs.

    Usage:
        async with get_db_session() as db:
            result = await db.execute(select(Wager))
            await db.commit()

    Yields:
        AsyncSession: SQLAlchemy async database session
    """
    factory = _get_async_session_factory()
    session = factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Create missing tables for every registered model."""
    # Importing the models package registers all tables on Base.metadata
    import models  # noqa: F401

    async with _get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and its connection pool."""
    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_factory = None


async def check_db_connection() -> bool:
    """Check if the database answers a trivial query."""
    try:
        async with _get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def get_db_info() -> dict:
    """Get database connection information with credentials hidden."""
    url = _get_async_engine().url
    return {
        "url": url.render_as_string(hide_password=True),
        "dialect": url.get_dialect().name,
        "environment": settings.environment,
    }
