"""
Capacity checking for activities on a given calendar day.

CAPACITY MODEL
==============

An activity may define ``max_group_size``: the total number of people it can
take on one calendar day, summed across all bookings for that day.

  booked    = sum(people) of bookings for (activity, day)
  remaining = max_group_size - booked
  admitted  = remaining >= requested        (inclusive: an exact fit is admitted)

Policies:
  - No max_group_size (NULL or 0): unlimited, always admitted.
  - Unknown activity: not admitted, reported as data ("Activity not found").
  - remaining may be negative after direct admin edits; such a day rejects
    every further request.
  - Cancelled bookings count toward ``booked`` unless
    CAPACITY_COUNT_CANCELLED is disabled.

Results are data, not exceptions: callers branch on ``has_capacity``.
Storage failures propagate.
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from tour_booking.core.dates import DayLike, to_day
from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import capacity_check_latency, record_capacity_check
from tour_booking.repositories.base import ActivityRepository, BookingRepository

logger = get_logger(__name__)

ActivityId = Union[int, str]


@dataclass(frozen=True)
class CapacityResult:
    has_capacity: bool
    remaining_spots: Optional[int] = None
    # 0 signals "no limit"; None when the activity does not exist
    max_group_size: Optional[int] = None
    message: str = ""

    @property
    def is_unlimited(self) -> bool:
        return self.has_capacity and self.max_group_size == 0


def coerce_activity_id(value: ActivityId) -> Optional[int]:
    """Return an int id, or None when ``value`` cannot name an activity."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text) if text.isdigit() else None


class CapacityChecker:
    def __init__(
        self,
        activities: ActivityRepository,
        bookings: BookingRepository,
        count_cancelled: bool = True,
    ):
        self.activities = activities
        self.bookings = bookings
        self.count_cancelled = count_cancelled

    async def check(
        self,
        activity_id: ActivityId,
        day: DayLike,
        requested_people: int,
    ) -> CapacityResult:
        """Decide whether ``requested_people`` more fit on ``day`` for the activity."""
        started = time.perf_counter()
        try:
            return await self._check(activity_id, to_day(day), requested_people)
        finally:
            capacity_check_latency.observe(time.perf_counter() - started)

    async def _check(self, activity_id: ActivityId, day: date, requested_people: int) -> CapacityResult:
        resolved_id = coerce_activity_id(activity_id)
        activity = await self.activities.get(resolved_id) if resolved_id is not None else None

        if activity is None:
            record_capacity_check("not_found")
            logger.info("capacity_activity_not_found", activity_id=str(activity_id))
            return CapacityResult(has_capacity=False, message="Activity not found")

        max_group_size = activity.max_group_size or 0
        if not max_group_size:
            record_capacity_check("unlimited")
            return CapacityResult(
                has_capacity=True,
                max_group_size=0,
                message="No capacity limit set for this activity",
            )

        booked = await self.bookings.booked_people(
            activity.id, day, include_cancelled=self.count_cancelled
        )
        remaining = max_group_size - booked

        if remaining >= requested_people:
            record_capacity_check("available")
            return CapacityResult(
                has_capacity=True,
                remaining_spots=remaining,
                max_group_size=max_group_size,
                message=f"Sufficient capacity available ({remaining} spots remaining)",
            )

        record_capacity_check("insufficient")
        logger.info(
            "capacity_insufficient",
            activity_id=activity.id,
            date=day.isoformat(),
            requested=requested_people,
            booked=booked,
            remaining=remaining,
        )
        return CapacityResult(
            has_capacity=False,
            remaining_spots=remaining,
            max_group_size=max_group_size,
            message=f"Insufficient capacity (only {remaining} spots remaining)",
        )

    async def remaining(self, activity_id: ActivityId, day: DayLike) -> Optional[int]:
        """Spots left on ``day``; None when the activity has no limit."""
        result = await self.check(activity_id, day, 1)
        if result.max_group_size == 0:
            return None
        return result.remaining_spots or 0
