"""
In-process event dispatch for post-admission side effects.

emit() never waits for handlers: each one runs as its own asyncio task, and
a failing handler is logged and counted without touching the others or the
request that emitted the event. Task references are kept until completion
so drain() can await them on shutdown.
"""

import asyncio
import datetime as dt
from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import record_side_effect

logger = get_logger(__name__)

Handler = Callable[["BookingAdmitted"], Awaitable[object]]


@dataclass(frozen=True)
class BookingAdmitted:
    booking_id: int
    activity_id: int
    activity_title: str
    name: str
    phone: str
    date: dt.date
    people: int
    notes: Optional[str] = None


class EventDispatcher:
    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def emit(self, event: object) -> None:
        for handler in self._handlers.get(type(event), []):
            task = asyncio.create_task(self._run(handler, event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run(self, handler: Handler, event: object) -> None:
        name = getattr(handler, "__name__", type(handler).__name__)
        try:
            await handler(event)
        except Exception as e:
            record_side_effect(name, ok=False)
            logger.error(
                "side_effect_failed",
                handler=name,
                event=type(event).__name__,
                error=str(e),
                exc_info=True,
            )
        else:
            record_side_effect(name, ok=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every in-flight handler task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
