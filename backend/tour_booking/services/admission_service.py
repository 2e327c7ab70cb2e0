"""
Redis-backed admission control for multi-process deployments.
Implements AdmissionStrategy with a per-key mutex (SET NX PX + owner token).

Circuit Breaker Pattern:
  On Redis failure, the system "fails open" and admits the request without
  a lock. Bookings keep flowing during a Redis outage at the cost of
  temporarily reverting to unguarded (optimistic) behavior.

  The lock TTL bounds how long a crashed holder can block a key.
"""

import asyncio
import time
import uuid
from typing import Callable, Optional

from redis.exceptions import RedisError

from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import redis_connection_errors
from tour_booking.infrastructure.redis_client import get_redis
from tour_booking.services.interfaces.admission import AdmissionStrategy

logger = get_logger(__name__)

# Delete only if we still own the lock
RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""

FAIL_OPEN_TOKEN = "fail-open"


class RedisAdmission(AdmissionStrategy):
    """
    Redis-based admission lock.

    Use when:
    - Several API workers/containers take bookings
    - Redis is already deployed for caching
    """

    name = "redis"

    def __init__(
        self,
        timeout: float = 5.0,
        ttl_ms: int = 10_000,
        retry_delay: float = 0.05,
        client_factory: Callable = get_redis,
    ):
        self.timeout = timeout
        self.ttl_ms = ttl_ms
        self.retry_delay = retry_delay
        self._client_factory = client_factory

    async def acquire(self, key: str) -> Optional[str]:
        client = await self._client_factory()
        if client is None:
            logger.warning("admission_lock_fail_open", key=key, reason="redis_unavailable")
            return FAIL_OPEN_TOKEN

        token = uuid.uuid4().hex
        deadline = time.monotonic() + self.timeout
        try:
            while True:
                if await client.set(key, token, nx=True, px=self.ttl_ms):
                    return token
                if time.monotonic() >= deadline:
                    logger.warning("admission_lock_timeout", key=key)
                    return None
                await asyncio.sleep(self.retry_delay)
        except RedisError as e:
            redis_connection_errors.inc()
            logger.error("admission_lock_fail_open", key=key, error=str(e))
            return FAIL_OPEN_TOKEN

    async def release(self, key: str, token: str) -> None:
        if token == FAIL_OPEN_TOKEN:
            return
        client = await self._client_factory()
        if client is None:
            return
        try:
            await client.eval(RELEASE_SCRIPT, 1, key, token)
        except RedisError as e:
            # TTL expiry frees the key
            redis_connection_errors.inc()
            logger.error("admission_lock_release_failed", key=key, error=str(e))
