"""
Admin dashboard schemas: audit log, notification stats, CRM status.
"""

import datetime as dt
from typing import Any, Optional

from tour_booking.schemas.base import CamelModel


class AuditLogResponse(CamelModel):
    id: int
    user_id: Optional[int]
    action: str
    entity_type: Optional[str]
    entity_id: Optional[int]
    details: Optional[Any]
    created_at: dt.datetime


class AdminMessageStats(CamelModel):
    sent: int = 0
    failed: int = 0


class NotificationStatsResponse(CamelModel):
    total_messages_sent: int
    total_messages_failed: int
    total_bookings: int
    last_sent_at: Optional[dt.datetime]
    messages_per_admin: dict[str, AdminMessageStats]


class CrmStatusResponse(CamelModel):
    connected: bool
    provider: Optional[str] = None
    last_sync: Optional[dt.datetime] = None
    total_contacts: Optional[int] = None
    error: Optional[str] = None


class CrmTestResponse(CamelModel):
    success: bool
    message: str


class WhatsAppResendResponse(CamelModel):
    success: bool
    message: str
    results: list[dict[str, Any]]
