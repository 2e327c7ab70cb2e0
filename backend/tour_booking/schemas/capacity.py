"""
Capacity and availability response shapes.
"""

from enum import Enum
from typing import Optional

from tour_booking.schemas.base import CamelModel


class CapacityResponse(CamelModel):
    activity_id: str
    date: str
    has_capacity: bool
    remaining_spots: Optional[int] = None
    max_group_size: Optional[int] = None


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    UNAVAILABLE = "unavailable"


class ActivityAvailability(CamelModel):
    date: str
    activity_id: int
    status: AvailabilityStatus
    spots_remaining: Optional[int] = None
