"""
Availability calendar endpoints.
"""

from fastapi import APIRouter, Depends

from tour_booking.api.deps import get_repositories
from tour_booking.api.routes.capacity import parse_day
from tour_booking.core.config import Settings, get_settings
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.capacity import ActivityAvailability
from tour_booking.services import availability_service

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.get("/date/{day}", response_model=list[ActivityAvailability])
async def availability_for_date(
    day: str,
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
):
    return await availability_service.availability_for_date(
        repos,
        parse_day(day),
        settings.LIMITED_AVAILABILITY_RATIO,
        count_cancelled=settings.CAPACITY_COUNT_CANCELLED,
    )


@router.get("/activity/{activity_id}/{month}", response_model=list[ActivityAvailability])
async def availability_for_month(
    activity_id: int,
    month: str,
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
):
    """Per-day availability for one activity over a ``YYYY-MM`` month."""
    return await availability_service.availability_for_month(
        repos,
        activity_id,
        month,
        settings.LIMITED_AVAILABILITY_RATIO,
        count_cancelled=settings.CAPACITY_COUNT_CANCELLED,
    )
