"""
Pydantic schemas for admin authentication.
"""

import datetime as dt
from typing import Optional

from pydantic import Field

from tour_booking.schemas.base import CamelModel


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)
    remember_me: bool = False


class AuthUser(CamelModel):
    id: int
    username: str
    role: str


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    expires_in: int
    user: AuthUser


class LogoutResponse(CamelModel):
    success: bool = True
    message: str = "Logged out"


class AdminUserResponse(CamelModel):
    id: int
    username: str
    role: str
    created_at: dt.datetime
    last_login: Optional[dt.datetime] = None
