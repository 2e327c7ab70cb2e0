"""
Availability views for the booking calendar.

Status per (activity, day), from live booking totals:
  - activity flagged unavailable   -> unavailable
  - no max_group_size              -> available (unlimited)
  - remaining <= 0                 -> unavailable
  - remaining <= ratio * max       -> limited   (ratio = LIMITED_AVAILABILITY_RATIO)
  - otherwise                      -> available
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException, status

from tour_booking.models import Activity
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.capacity import ActivityAvailability, AvailabilityStatus


def classify(
    activity: Activity,
    booked: int,
    limited_ratio: float,
) -> tuple[AvailabilityStatus, Optional[int]]:
    """Return (status, spots remaining). Spots are None for unlimited activities."""
    max_group_size = activity.max_group_size or 0
    remaining = max(max_group_size - booked, 0) if max_group_size else None

    if not activity.available:
        return AvailabilityStatus.UNAVAILABLE, remaining
    if remaining is None:
        return AvailabilityStatus.AVAILABLE, None
    if remaining <= 0:
        return AvailabilityStatus.UNAVAILABLE, 0
    if remaining <= max_group_size * limited_ratio:
        return AvailabilityStatus.LIMITED, remaining
    return AvailabilityStatus.AVAILABLE, remaining


def parse_month(value: str) -> tuple[date, date]:
    """'YYYY-MM' -> (first day, last day)."""
    try:
        year_text, month_text = value.split("-")
        year, month = int(year_text), int(month_text)
        first = date(year, month, 1)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid month format",
        )
    return first, date(year, month, calendar.monthrange(year, month)[1])


async def availability_for_date(
    repos: Repositories,
    day: date,
    limited_ratio: float,
    count_cancelled: bool = True,
) -> list[ActivityAvailability]:
    activities = await repos.activities.list_all()
    booked = await repos.bookings.booked_people_by_activity(day, include_cancelled=count_cancelled)

    entries = []
    for activity in activities:
        state, spots = classify(activity, booked.get(activity.id, 0), limited_ratio)
        entries.append(ActivityAvailability(
            date=day.isoformat(),
            activity_id=activity.id,
            status=state,
            spots_remaining=spots,
        ))
    return entries


async def availability_for_month(
    repos: Repositories,
    activity_id: int,
    month: str,
    limited_ratio: float,
    count_cancelled: bool = True,
) -> list[ActivityAvailability]:
    first, last = parse_month(month)
    activity = await repos.activities.get(activity_id)
    if not activity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found",
        )

    booked = await repos.bookings.booked_people_by_day(
        activity.id, first, last, include_cancelled=count_cancelled
    )

    entries = []
    day = first
    while day <= last:
        state, spots = classify(activity, booked.get(day, 0), limited_ratio)
        entries.append(ActivityAvailability(
            date=day.isoformat(),
            activity_id=activity.id,
            status=state,
            spots_remaining=spots,
        ))
        day += timedelta(days=1)
    return entries
