"""
Database engine, async session factory and schema setup for the archive.

- Async engine and session for PostgreSQL (asyncpg) or SQLite (aiosqlite).
- Optional default database_url via set_database_url() so callers can use get_engine()/get_session_factory() without passing URL.
- dispose_engine() to release connections at shutdown and between tests.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from telegram_archive.base import Base
from telegram_archive import models  # noqa: F401 - register ArchivedMessageRow with Base.metadata

# Lazy init; default URL can be set by application at startup
_default_url: str | None = None
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def set_database_url(database_url: str) -> None:
    """Set the default database URL for get_engine() and get_session_factory()."""
    global _default_url
    _default_url = database_url


def get_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create or return the async engine.
    Uses default URL from set_database_url() if database_url is not provided.
    Pool sizing only applies to server databases; SQLite keeps the driver's default pool.
    """
    global _engine
    url = database_url or _default_url
    if url is None:
        raise RuntimeError("database_url not set: call set_database_url() or pass database_url= to get_engine()")
    if _engine is None:
        kwargs = {"echo": False, "pool_pre_ping": True}
        if not url.startswith("sqlite"):
            kwargs.update(pool_size=10, max_overflow=20)
        _engine = create_async_engine(url, **kwargs)
    return _engine


async def init_db(engine: AsyncEngine | None = None, database_url: str | None = None) -> None:
    """
    Create archive tables if missing (startup / tests).
    If engine is provided, use it; otherwise create from database_url or default URL.
    """
    if engine is None:
        engine = get_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Return async session factory. Uses default URL from set_database_url() if not provided."""
    global _session_factory
    url = database_url or _default_url
    if url is None:
        raise RuntimeError("database_url not set: call set_database_url() or pass database_url= to get_session_factory()")
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(url),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Dispose the cached engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Async context manager for a single DB session (commit on success, rollback on error)."""
    factory = factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
