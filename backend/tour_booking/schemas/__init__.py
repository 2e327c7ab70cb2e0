from tour_booking.schemas.activity import ActivityCreate, ActivityResponse, ActivityUpdate
from tour_booking.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdate,
    BookingUpdate,
)
from tour_booking.schemas.capacity import ActivityAvailability, AvailabilityStatus, CapacityResponse
from tour_booking.schemas.user import AuthUser, LoginRequest, LoginResponse

__all__ = [
    "ActivityCreate", "ActivityResponse", "ActivityUpdate",
    "BookingCreate", "BookingResponse", "BookingStatus", "BookingStatusUpdate", "BookingUpdate",
    "ActivityAvailability", "AvailabilityStatus", "CapacityResponse",
    "AuthUser", "LoginRequest", "LoginResponse",
]
