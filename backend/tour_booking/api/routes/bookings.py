"""
Booking endpoints: public admission plus admin management.
"""

from fastapi import APIRouter, Depends, status

from tour_booking.api.deps import (
    get_admission,
    get_crm,
    get_dispatcher,
    get_notifier,
    get_repositories,
)
from tour_booking.core.config import Settings, get_settings
from tour_booking.core.security import CurrentAdmin, get_current_admin
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.admin import WhatsAppResendResponse
from tour_booking.schemas.booking import (
    BookingActionResponse,
    BookingCreate,
    BookingResponse,
    BookingStatusResponse,
    BookingStatusUpdate,
    BookingUpdate,
)
from tour_booking.services import booking_service
from tour_booking.services.crm_service import CrmService
from tour_booking.services.events import EventDispatcher
from tour_booking.services.interfaces.admission import AdmissionStrategy
from tour_booking.services.notification_service import WhatsAppNotifier

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    repos: Repositories = Depends(get_repositories),
    admission: AdmissionStrategy = Depends(get_admission),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
):
    """
    Book an activity for a day.

    Rejected with 400 and ``remainingSpots`` when the party does not fit in
    what is left for that activity and day.
    """
    return await booking_service.create_booking(
        repos,
        booking_data,
        admission,
        dispatcher,
        count_cancelled=settings.CAPACITY_COUNT_CANCELLED,
    )


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    return await booking_service.list_bookings(repos)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    return await booking_service.get_booking(repos, booking_id)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    booking_data: BookingUpdate,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    """Edit a booking. Capacity is not re-checked."""
    return await booking_service.update_booking(repos, booking_id, booking_data, admin.id)


@router.patch("/{booking_id}/status", response_model=BookingStatusResponse)
async def update_booking_status(
    booking_id: int,
    status_data: BookingStatusUpdate,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    booking = await booking_service.update_status(
        repos, booking_id, status_data.status.value, admin.id
    )
    return BookingStatusResponse(
        success=True,
        message=f"Booking status updated to {booking.status}",
        booking=BookingResponse.model_validate(booking),
    )


@router.delete("/{booking_id}", response_model=BookingActionResponse)
async def delete_booking(
    booking_id: int,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
):
    await booking_service.delete_booking(repos, booking_id, admin.id)
    return BookingActionResponse(success=True, message="Booking deleted")


@router.post("/{booking_id}/sync-crm", response_model=BookingActionResponse)
async def sync_booking_crm(
    booking_id: int,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
    crm: CrmService = Depends(get_crm),
):
    booking, result = await booking_service.sync_booking_crm(repos, booking_id, crm, admin.id)
    return BookingActionResponse(
        success=result.success,
        message=result.message,
        booking=BookingResponse.model_validate(booking),
    )


@router.post("/{booking_id}/resend-whatsapp", response_model=WhatsAppResendResponse)
async def resend_whatsapp(
    booking_id: int,
    admin: CurrentAdmin = Depends(get_current_admin),
    repos: Repositories = Depends(get_repositories),
    notifier: WhatsAppNotifier = Depends(get_notifier),
):
    result = await booking_service.resend_notification(repos, booking_id, notifier, admin.id)
    return WhatsAppResendResponse(
        success=result.success,
        message="Notification sent" if result.success else "Notification could not be delivered",
        results=[r.as_dict() for r in result.results],
    )
