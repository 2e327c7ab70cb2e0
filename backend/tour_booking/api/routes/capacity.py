"""
Capacity lookups for the booking form (one spot requested).
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tour_booking.api.deps import get_repositories
from tour_booking.core.config import Settings, get_settings
from tour_booking.core.dates import to_day
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.capacity import CapacityResponse
from tour_booking.services.capacity_service import CapacityChecker

router = APIRouter(prefix="/capacity", tags=["Capacity"])


def parse_day(value: str) -> date:
    try:
        return to_day(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid date format")


async def _capacity(checker: CapacityChecker, activity_id: str, day: date, raw_date: str) -> CapacityResponse:
    result = await checker.check(activity_id, day, 1)
    return CapacityResponse(
        activity_id=activity_id,
        date=raw_date,
        has_capacity=result.has_capacity,
        remaining_spots=result.remaining_spots,
        max_group_size=result.max_group_size,
    )


@router.get("/activity/{activity_id}/{day}", response_model=CapacityResponse)
async def get_activity_capacity(
    activity_id: str,
    day: str,
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
):
    checker = CapacityChecker(
        repos.activities, repos.bookings, count_cancelled=settings.CAPACITY_COUNT_CANCELLED
    )
    return await _capacity(checker, activity_id, parse_day(day), day)


@router.get("/date/{day}", response_model=list[CapacityResponse])
async def get_date_capacity(
    day: str,
    activity_ids: Optional[str] = Query(None, alias="activityIds"),
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
):
    """Capacity for each id in the comma-separated ``activityIds``."""
    parsed = parse_day(day)
    checker = CapacityChecker(
        repos.activities, repos.bookings, count_cancelled=settings.CAPACITY_COUNT_CANCELLED
    )
    ids = [i.strip() for i in activity_ids.split(",") if i.strip()] if activity_ids else []
    return [await _capacity(checker, activity_id, parsed, day) for activity_id in ids]
