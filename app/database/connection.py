"""Database connection management with SQLAlchemy async sessions.

The engine uses the asyncpg driver against PostgreSQL in production. Any
other SQLAlchemy async URL (e.g. ``sqlite+aiosqlite://`` in tests) is used
as-is.

Usage:
    from app.database.connection import get_session
    from app.database.orm import ContentRecord

    async with get_session() as session:
        record = await session.get(ContentRecord, 1)
        ...
        await session.commit()
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.core.logging import get_logger, log_fields


logger = get_logger("database")

_ASYNC_PREFIXES = (
    ("postgresql://", "postgresql+asyncpg://"),
    ("postgres://", "postgresql+asyncpg://"),
)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_async_database_url(url: str) -> str:
    """Rewrite plain PostgreSQL URLs to use the asyncpg driver.

    ``postgres://u:p@host/db`` becomes ``postgresql+asyncpg://u:p@host/db``;
    URLs that already name a driver are returned unchanged.
    """
    for prefix, replacement in _ASYNC_PREFIXES:
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": False}
    return {
        "pool_size": settings.db_pool_min_size,
        "max_overflow": settings.db_pool_max_size - settings.db_pool_min_size,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "echo": False,
        "connect_args": {"server_settings": {"application_name": "cryptobrief", "timezone": "UTC"}},
    }


async def init_sqlalchemy_engine(url: str | None = None) -> AsyncEngine:
    """Create the engine and session factory once; later calls reuse them."""
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    db_url = get_async_database_url(url or settings.database_url)
    _engine = create_async_engine(db_url, **_engine_kwargs(db_url))
    # Repositories flush explicitly and read rows back after commit
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info(
        "SQLAlchemy async engine initialized",
        extra=log_fields(dialect=_engine.dialect.name),
    )
    return _engine


async def get_engine() -> AsyncEngine:
    if _engine is None:
        await init_sqlalchemy_engine()
    return _engine


async def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        await init_sqlalchemy_engine()
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session; roll back if the block raises."""
    factory = await get_session_factory()

    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables (development and tests; production uses Alembic)."""
    from .orm import Base

    engine = await get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def db_healthcheck() -> bool:
    """Run ``SELECT 1`` against the database."""
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database healthcheck failed", extra=log_fields(reason=str(exc)))
        return False
    return True


async def close_sqlalchemy_engine() -> None:
    """Dispose the engine; the next session call re-creates it."""
    global _engine, _session_factory

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("SQLAlchemy engine closed")


async def init_database() -> None:
    await init_sqlalchemy_engine()


async def close_database() -> None:
    await close_sqlalchemy_engine()
