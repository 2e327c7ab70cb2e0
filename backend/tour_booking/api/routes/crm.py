"""
CRM integration status and connectivity check.
"""

from fastapi import APIRouter, Depends

from tour_booking.api.deps import get_crm
from tour_booking.core.security import CurrentAdmin, get_current_admin
from tour_booking.schemas.admin import CrmStatusResponse, CrmTestResponse
from tour_booking.services.crm_service import CrmService

router = APIRouter(prefix="/crm", tags=["CRM"])


@router.get("/status", response_model=CrmStatusResponse)
async def crm_status(crm: CrmService = Depends(get_crm)):
    return crm.status()


@router.post("/test", response_model=CrmTestResponse)
async def crm_test(
    admin: CurrentAdmin = Depends(get_current_admin),
    crm: CrmService = Depends(get_crm),
):
    result = await crm.test_connection()
    return CrmTestResponse(success=result.success, message=result.message)
