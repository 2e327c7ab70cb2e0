"""
Pydantic schemas for booking-related request/response validation.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from tour_booking.core.dates import to_day
from tour_booking.schemas.base import CamelModel


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def _coerce_day(value):
    # Time-of-day and timezone noise collapse to the calendar day here
    if value is None:
        return None
    return to_day(value)


class BookingCreate(CamelModel):
    name: str = Field(..., min_length=3, max_length=255)
    phone: str = Field(..., min_length=7, max_length=50)
    activity_id: int = Field(..., gt=0)
    date: dt.date
    people: int = Field(default=1, ge=1, le=500)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return _coerce_day(value)


class BookingUpdate(CamelModel):
    """Admin edit. Capacity is not re-checked."""

    name: Optional[str] = Field(None, min_length=3, max_length=255)
    phone: Optional[str] = Field(None, min_length=7, max_length=50)
    activity_id: Optional[int] = Field(None, gt=0)
    date: Optional[dt.date] = None
    people: Optional[int] = Field(None, ge=1, le=500)
    notes: Optional[str] = Field(None, max_length=2000)
    status: Optional[BookingStatus] = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return _coerce_day(value)


class BookingStatusUpdate(CamelModel):
    status: BookingStatus


class BookingResponse(CamelModel):
    id: int
    name: str
    phone: str
    activity_id: int
    date: dt.date
    people: int
    notes: Optional[str]
    status: str
    crm_reference: Optional[str]
    created_at: dt.datetime


class BookingStatusResponse(CamelModel):
    success: bool
    message: str
    booking: BookingResponse


class BookingActionResponse(CamelModel):
    success: bool
    message: str
    booking: Optional[BookingResponse] = None
