"""
Admission control strategy interface.
Allows swapping between different concurrency control approaches for the
read-check-write sequence of a booking.
"""

import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Optional

from tour_booking.core.exceptions import AdmissionBusyError
from tour_booking.core.metrics import admission_lock_timeouts, admission_lock_wait


def admission_key(activity_id: int, day: date) -> str:
    return f"admission:{activity_id}:{day.isoformat()}"


class AdmissionStrategy(ABC):
    """
    Interface for admission control strategies.

    A booking holds the lock for its (activity, day) key while it reads the
    booked total, decides and commits the new row. Different days and
    activities never contend.

    Implementations:
    - LocalAdmission: per-key asyncio.Lock, one process
    - RedisAdmission: per-key Redis mutex, many processes
    - OptimisticAdmission: no serialization (concurrent requests can overbook)
    """

    name = "abstract"

    @abstractmethod
    async def acquire(self, key: str) -> Optional[str]:
        """
        Acquire the lock for ``key``.

        Returns:
            An ownership token to pass to release(), or None on timeout.
        """

    @abstractmethod
    async def release(self, key: str, token: str) -> None:
        """Release a lock previously acquired with ``token``."""

    async def close(self) -> None:
        """Release strategy resources on shutdown."""

    @asynccontextmanager
    async def hold(self, activity_id: int, day: date) -> AsyncIterator[None]:
        key = admission_key(activity_id, day)
        started = time.perf_counter()
        token = await self.acquire(key)
        admission_lock_wait.labels(strategy=self.name).observe(time.perf_counter() - started)
        if token is None:
            admission_lock_timeouts.labels(strategy=self.name).inc()
            raise AdmissionBusyError(key)
        try:
            yield
        finally:
            await self.release(key, token)
