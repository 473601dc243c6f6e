"""PostgreSQL connection management.

SQLAlchemy (async) owns the schema and creates tables at startup. Queries go
through a shared asyncpg pool used by StoryRepository.
"""

from typing import Optional

import asyncpg
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..config import DATABASE_URL, get_asyncpg_dsn


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


# Create async engine (only if DATABASE_URL is configured)
engine: Optional[AsyncEngine] = None

if DATABASE_URL:
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,  # Set to True for SQL debugging
        pool_size=2,
        max_overflow=0,
        pool_pre_ping=True,  # Verify connections before use
    )

# Shared asyncpg pool (set during API/worker startup)
_pool: Optional[asyncpg.Pool] = None


def _check_configured():
    """Raise an error if the database is not configured."""
    if engine is None:
        raise RuntimeError(
            "Database not configured. Set DATABASE_URL environment variable "
            "to a PostgreSQL connection string."
        )


async def init_db() -> None:
    """Initialize database - create all tables."""
    _check_configured()
    # Import models so they register on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_pool(min_size: int = 1, max_size: int = 5) -> asyncpg.Pool:
    """Create and register the shared asyncpg pool."""
    global _pool
    _check_configured()
    _pool = await asyncpg.create_pool(get_asyncpg_dsn(), min_size=min_size, max_size=max_size)
    return _pool


def get_pool() -> asyncpg.Pool:
    """Get the shared asyncpg pool. Raises if not initialized."""
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Ensure the API server is running.")
    return _pool


async def close_pool() -> None:
    """Close the shared pool and dispose of the SQLAlchemy engine."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
    if engine is not None:
        await engine.dispose()
