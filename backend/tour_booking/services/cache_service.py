"""
Redis caching service for activity listings.

CACHING STRATEGY
================

What we cache:
  - The public activity listing (JSON-serialized response bodies)
  - Cache key pattern: "activities:list:{variant}"

Why:
  - The catalog page is the most frequent read and changes only on admin edits

Invalidation strategy:
  - On activity create, update or delete: delete all "activities:list:*" keys
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

What is NOT cached:
  - Capacity and availability. Booking admission needs live totals and a
    stale read there means overbooking.

Every operation is best-effort: a Redis failure is logged and treated as a
miss, never surfaced to the caller.
"""

import json
from typing import Any, Optional

from redis.exceptions import RedisError

from tour_booking.core.config import get_settings
from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import record_cache_operation, redis_connection_errors
from tour_booking.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

ACTIVITY_LIST_PREFIX = "activities:list:"


def _make_activity_list_key(variant: str = "all") -> str:
    return f"{ACTIVITY_LIST_PREFIX}{variant}"


async def get_cached_activities(variant: str = "all") -> Optional[list[dict[str, Any]]]:
    client = await get_redis()
    if not client:
        return None

    key = _make_activity_list_key(variant)
    try:
        data = await client.get(key)
    except RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_activities(data: list[dict[str, Any]], variant: str = "all") -> None:
    client = await get_redis()
    if not client:
        return

    ttl = get_settings().REDIS_CACHE_TTL
    key = _make_activity_list_key(variant)
    try:
        await client.setex(key, ttl, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=ttl)
    except RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_activity_cache() -> None:
    """Drop every cached activity listing (prefix SCAN)."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{ACTIVITY_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except RedisError as e:
        redis_connection_errors.inc()
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Redis cache statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
