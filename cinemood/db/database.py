"""Async engine and sessions for the accounts database.

SQLite (aiosqlite) is the default for local runs; Postgres URLs are switched
to asyncpg and get a sized connection pool.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cinemood.config import get_settings
from cinemood.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if not settings.is_sqlite:
        options.update(pool_size=10, max_overflow=20, pool_timeout=30, pool_recycle=1800)
    return options


engine = create_async_engine(settings.database_url_async, **_engine_options())

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create missing tables."""
    from cinemood.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def dispose_db() -> None:
    """Close pooled connections at shutdown."""
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits on success, rolls back on error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
