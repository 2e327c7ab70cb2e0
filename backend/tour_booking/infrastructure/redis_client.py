"""
Redis client shared by caching, token revocation and admission locks.
Separated from business logic for clean architecture.

Redis is optional: every caller must handle ``None`` (disabled or unreachable).
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from tour_booking.core.config import get_settings
from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import redis_connection_errors

logger = get_logger(__name__)

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client
    settings = get_settings()

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await client.ping()
        except RedisError as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            await client.aclose()
            return None
        _redis_client = client
        logger.info("redis_connected", url=settings.REDIS_URL)

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
