"""
In-process admission strategy: one asyncio.Lock per (activity, day) key.
"""

import asyncio
from typing import Optional

from tour_booking.services.interfaces.admission import AdmissionStrategy


class LocalAdmission(AdmissionStrategy):
    """
    Serializes bookings per key within a single worker process.

    Locks are created on demand and dropped once no request holds or waits
    for them, so the table only grows with in-flight keys.

    Use when:
    - One application process (or sticky routing per activity)
    - No Redis available
    """

    name = "local"

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    async def acquire(self, key: str) -> Optional[str]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._forget(key)
            return None
        return key

    async def release(self, key: str, token: str) -> None:
        lock = self._locks.get(key)
        if lock is not None and lock.locked():
            lock.release()
        self._forget(key)

    def _forget(self, key: str) -> None:
        users = self._users.get(key, 0) - 1
        if users <= 0:
            self._users.pop(key, None)
            self._locks.pop(key, None)
        else:
            self._users[key] = users

    @property
    def active_keys(self) -> int:
        return len(self._locks)
