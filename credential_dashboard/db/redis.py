"""Redis connection management.

Mirrors engine.py: when REDIS_URL is configured we create a real
connection pool; when it's None (local dev, tests), the snapshot store
falls back to in-memory and no Redis server is needed.

Redis is only used to share the latest published snapshot between
processes: a single refresher (in one API instance, or the standalone
``python -m credential_dashboard.worker`` process) publishes, and every
API instance reads the same value.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from credential_dashboard.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,  # return str instead of bytes
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Startup/shutdown hook for Redis mirrors lifespan_db()."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured; snapshots are kept in memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]  # redis stubs mistype async ping as bool
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except Exception:
        logger.exception("Redis connection failed on startup")
        # Keep serving; refreshes and reads fail until Redis is back.
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
