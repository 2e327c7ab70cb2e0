"""
Audit trail for admin and system actions.
"""

from typing import Optional

from tour_booking.core.logging import get_logger
from tour_booking.models import AuditLog
from tour_booking.repositories.base import Repositories

logger = get_logger(__name__)

CREATE = "CREATE"
UPDATE = "UPDATE"
UPDATE_STATUS = "UPDATE_STATUS"
DELETE = "DELETE"
LOGIN = "LOGIN"
CRM_SYNC = "CRM_SYNC"
MANUAL_CRM_SYNC = "MANUAL_CRM_SYNC"
RESEND_WHATSAPP = "RESEND_WHATSAPP"


async def record(
    repos: Repositories,
    user_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    details: Optional[dict] = None,
) -> AuditLog:
    entry = await repos.audit_logs.create(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    logger.info(
        "audit_recorded",
        action=action,
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    return entry


async def list_audit_logs(repos: Repositories) -> list[AuditLog]:
    return await repos.audit_logs.list_all()
