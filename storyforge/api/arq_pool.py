"""ARQ Redis pool management.

This module provides access to the ARQ Redis connection pool used by the
API to enqueue content and asset generation jobs.
"""

from typing import Optional

from arq import ArqRedis, create_pool
from arq.connections import RedisSettings

from .config import REDIS_URL

# Global ARQ Redis pool (set during API startup)
_pool: Optional[ArqRedis] = None


def get_redis_settings() -> RedisSettings:
    """Redis settings from REDIS_URL, or arq defaults when unset."""
    if REDIS_URL:
        return RedisSettings.from_dsn(REDIS_URL)
    return RedisSettings()


async def open_pool() -> ArqRedis:
    """Create the ARQ pool and register it. Called during API startup."""
    pool = await create_pool(get_redis_settings())
    set_pool(pool)
    return pool


def set_pool(pool: ArqRedis) -> None:
    """Set the ARQ pool."""
    global _pool
    _pool = pool


def get_pool() -> ArqRedis:
    """Get the ARQ Redis pool. Raises if not initialized."""
    if _pool is None:
        raise RuntimeError(
            "ARQ pool not initialized. Ensure the API server is running."
        )
    return _pool


async def close_pool() -> None:
    """Close the ARQ pool. Called during API shutdown."""
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None
