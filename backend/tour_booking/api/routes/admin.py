"""
Admin dashboard endpoints.
"""

from fastapi import APIRouter, Depends

from tour_booking.api.deps import get_notifier, get_repositories
from tour_booking.core.security import CurrentAdmin, get_current_admin, require_superadmin
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.admin import AuditLogResponse, NotificationStatsResponse
from tour_booking.schemas.user import AdminUserResponse
from tour_booking.services import audit_service, auth_service
from tour_booking.services.notification_service import WhatsAppNotifier

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    admin: CurrentAdmin = Depends(require_superadmin),
    repos: Repositories = Depends(get_repositories),
):
    return await auth_service.list_admins(repos)


@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def list_audit_logs(
    admin: CurrentAdmin = Depends(require_superadmin),
    repos: Repositories = Depends(get_repositories),
):
    """All audit entries, newest first."""
    return await audit_service.list_audit_logs(repos)


@router.get("/notification-stats", response_model=NotificationStatsResponse)
async def notification_stats(
    admin: CurrentAdmin = Depends(get_current_admin),
    notifier: WhatsAppNotifier = Depends(get_notifier),
):
    return notifier.stats.snapshot()
