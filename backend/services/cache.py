"""
Redis Cache Service

Caches monthly bonus pools read by per-contract previews.
TTL-based with key prefixing and JSON serialization. Cache errors are
treated as misses so a Redis outage never blocks a calculation.
"""

import logging

import redis.asyncio as aioredis

from backend.config import get_settings
from engines.schemas.bonus_engine import MonthlyPool

logger = logging.getLogger(__name__)

# Lazy-initialized connection pool
_redis: aioredis.Redis | None = None

# Stored in place of a pool for periods with no configuration
NO_POOL_MARKER = "none"


def get_redis() -> aioredis.Redis:
    """Get or create the shared Redis connection."""
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(
            get_settings().redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
        )
    return _redis


# ── Key Builders ──────────────────────────────────────


def pool_key(year: int, month: int) -> str:
    """Cache key for a monthly bonus pool."""
    return f"bonus_pool:{year}:{month:02d}"


class CacheMiss:
    """Sentinel returned by MonthlyPoolCache.get when nothing is cached."""

    def __repr__(self) -> str:
        return "MISS"


MISS = CacheMiss()


class MonthlyPoolCache:
    """
    Period-keyed cache of MonthlyPool lookups.

    "No pool configured" is cached too, so unconfigured months are not
    re-queried on every preview. Entries are invalidated on pool upsert
    and delete, and expire after the TTL otherwise.
    """

    def __init__(self, redis_client: aioredis.Redis, ttl: int | None = None):
        self.redis = redis_client
        self.ttl = ttl if ttl is not None else get_settings().pool_cache_ttl_seconds

    async def get(self, year: int, month: int) -> MonthlyPool | None | CacheMiss:
        """
        Cached pool for the period.

        Returns MISS when nothing is cached or Redis is unavailable, None
        when the period is cached as unconfigured.
        """
        key = pool_key(year, month)
        try:
            data = await self.redis.get(key)
        except Exception as e:
            logger.debug(f"Cache miss (error): {key}: {e}")
            return MISS
        if data is None:
            return MISS
        if data == NO_POOL_MARKER:
            return None
        try:
            return MonthlyPool.model_validate_json(data)
        except ValueError as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return MISS

    async def set(self, year: int, month: int, pool: MonthlyPool | None) -> bool:
        """Cache a pool (or its absence). Returns False on error."""
        key = pool_key(year, month)
        payload = pool.model_dump_json() if pool is not None else NO_POOL_MARKER
        try:
            await self.redis.set(key, payload, ex=self.ttl)
            return True
        except Exception as e:
            logger.debug(f"Cache set failed: {key}: {e}")
            return False

    async def invalidate(self, year: int, month: int) -> bool:
        """Drop the cached entry for a period."""
        key = pool_key(year, month)
        try:
            await self.redis.delete(key)
            return True
        except Exception as e:
            logger.debug(f"Cache invalidate failed: {key}: {e}")
            return False
