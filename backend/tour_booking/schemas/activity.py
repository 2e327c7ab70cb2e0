"""
Pydantic schemas for activity (tour) catalog validation.
"""

import datetime as dt
from typing import Literal, Optional

from pydantic import Field

from tour_booking.schemas.base import CamelModel

PriceType = Literal["fixed", "per_person"]


class ActivityCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10)
    price: int = Field(..., gt=0)
    image: str = Field(..., min_length=1, max_length=500)
    featured: bool = True
    available: bool = True
    get_your_guide_price: Optional[int] = Field(None, gt=0)
    duration_hours: Optional[int] = Field(None, gt=0)
    includes_food: bool = False
    includes_transportation: bool = False
    max_group_size: Optional[int] = Field(None, gt=0)
    price_type: PriceType = "per_person"


class ActivityUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    price: Optional[int] = Field(None, gt=0)
    image: Optional[str] = Field(None, min_length=1, max_length=500)
    featured: Optional[bool] = None
    available: Optional[bool] = None
    get_your_guide_price: Optional[int] = Field(None, gt=0)
    duration_hours: Optional[int] = Field(None, gt=0)
    includes_food: Optional[bool] = None
    includes_transportation: Optional[bool] = None
    # Explicit null removes the capacity limit
    max_group_size: Optional[int] = Field(None, gt=0)
    price_type: Optional[PriceType] = None


class ActivityResponse(CamelModel):
    id: int
    title: str
    description: str
    price: int
    image: str
    featured: bool
    available: bool
    get_your_guide_price: Optional[int]
    duration_hours: Optional[int]
    includes_food: bool
    includes_transportation: bool
    max_group_size: Optional[int]
    price_type: str
    created_by: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime


class ActivityDeleteResponse(CamelModel):
    success: bool
