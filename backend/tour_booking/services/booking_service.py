"""
Booking admission and administration.

CONCURRENCY STRATEGY: Per-(activity, day) admission lock
=========================================================

Problem:
  Two customers book the last spots of a tour on the same day at once.
  Both read booked=8 of 10, both see 2 remaining, both insert 2 people.
  Result: 12 people on a tour that takes 10.

Solution:
  Capacity is a sum over booking rows, not a counter column, so there is no
  single row to version. Instead the read-check-write sequence runs under
  an admission lock keyed by (activity_id, day):

  1. Acquire admission:{activity_id}:{day}
  2. Sum people already booked for that activity and day
  3. Reject if remaining < requested, otherwise insert the booking
  4. Commit, then release the lock
  5. Emit BookingAdmitted for notifications and CRM sync

  The commit happens inside the lock: releasing before commit would let the
  next request read a total that does not include this booking yet.
  Bookings for different activities or days never contend.

  ADMISSION_STRATEGY selects how the lock is held (see strategy_factory).
  "optimistic" skips serialization and can overbook under concurrency.

Admin edits (update, status change) do not re-check capacity.
"""

import time
from typing import Any, Optional

from fastapi import HTTPException, status

from tour_booking.core.exceptions import AdmissionBusyError, InsufficientCapacityError
from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import booking_latency, record_booking_attempt
from tour_booking.models import Booking
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.booking import BookingCreate, BookingUpdate
from tour_booking.services import audit_service
from tour_booking.services.capacity_service import CapacityChecker
from tour_booking.services.crm_service import CrmService, CrmSyncResult
from tour_booking.services.events import BookingAdmitted, EventDispatcher
from tour_booking.services.interfaces.admission import AdmissionStrategy
from tour_booking.services.notification_service import NotificationResult, WhatsAppNotifier

logger = get_logger(__name__)

ENTITY = "booking"


async def create_booking(
    repos: Repositories,
    booking_data: BookingCreate,
    admission: AdmissionStrategy,
    dispatcher: EventDispatcher,
    count_cancelled: bool = True,
) -> Booking:
    """
    Admit a booking if its party fits in the remaining spots for the day.

    Raises InsufficientCapacityError when it does not fit and
    AdmissionBusyError when the admission lock cannot be acquired in time.
    """
    started = time.perf_counter()
    checker = CapacityChecker(repos.activities, repos.bookings, count_cancelled=count_cancelled)

    try:
        async with admission.hold(booking_data.activity_id, booking_data.date):
            result = await checker.check(
                booking_data.activity_id, booking_data.date, booking_data.people
            )
            if not result.has_capacity:
                record_booking_attempt("rejected")
                logger.warning(
                    "booking_rejected",
                    activity_id=booking_data.activity_id,
                    date=booking_data.date.isoformat(),
                    people=booking_data.people,
                    remaining=result.remaining_spots,
                    reason=result.message,
                )
                raise InsufficientCapacityError(
                    details=result.message,
                    remaining_spots=result.remaining_spots,
                )

            booking = await repos.bookings.create({
                "name": booking_data.name,
                "phone": booking_data.phone,
                "activity_id": booking_data.activity_id,
                "date": booking_data.date,
                "people": booking_data.people,
                "notes": booking_data.notes,
                "status": "pending",
            })
            await repos.commit()
    except AdmissionBusyError:
        record_booking_attempt("busy")
        logger.warning(
            "booking_admission_busy",
            activity_id=booking_data.activity_id,
            date=booking_data.date.isoformat(),
        )
        raise
    finally:
        booking_latency.observe(time.perf_counter() - started)

    record_booking_attempt("admitted")
    logger.info(
        "booking_admitted",
        booking_id=booking.id,
        activity_id=booking.activity_id,
        date=booking.date.isoformat(),
        people=booking.people,
        remaining=remaining_after(result.remaining_spots, booking.people),
    )

    dispatcher.emit(to_event(booking, await activity_title(repos, booking.activity_id)))
    return booking


def to_event(booking: Booking, title: str) -> BookingAdmitted:
    return BookingAdmitted(
        booking_id=booking.id,
        activity_id=booking.activity_id,
        activity_title=title,
        name=booking.name,
        phone=booking.phone,
        date=booking.date,
        people=booking.people,
        notes=booking.notes,
    )


async def list_bookings(repos: Repositories) -> list[Booking]:
    return await repos.bookings.list_all()


async def get_booking(repos: Repositories, booking_id: int) -> Booking:
    booking = await repos.bookings.get(booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


async def update_booking(
    repos: Repositories,
    booking_id: int,
    booking_data: BookingUpdate,
    admin_id: int,
) -> Booking:
    booking = await get_booking(repos, booking_id)
    changes: dict[str, Any] = booking_data.model_dump(exclude_unset=True)
    if "status" in changes and changes["status"] is not None:
        changes["status"] = changes["status"].value
    # Required columns cannot be cleared
    changes = {k: v for k, v in changes.items() if v is not None or k == "notes"}

    booking = await repos.bookings.update(booking, changes)
    await audit_service.record(
        repos, admin_id, audit_service.UPDATE, ENTITY, booking.id,
        {"changes": _jsonable(changes)},
    )
    logger.info("booking_updated", booking_id=booking.id, fields=sorted(changes))
    return booking


async def update_status(
    repos: Repositories,
    booking_id: int,
    new_status: str,
    admin_id: int,
) -> Booking:
    booking = await get_booking(repos, booking_id)
    previous = booking.status
    booking = await repos.bookings.update(booking, {"status": new_status})
    await audit_service.record(
        repos, admin_id, audit_service.UPDATE_STATUS, ENTITY, booking.id,
        {"from": previous, "to": new_status},
    )
    logger.info("booking_status_updated", booking_id=booking.id, previous=previous, status=new_status)
    return booking


async def delete_booking(repos: Repositories, booking_id: int, admin_id: int) -> None:
    booking = await get_booking(repos, booking_id)
    snapshot = {
        "name": booking.name,
        "activity_id": booking.activity_id,
        "date": booking.date.isoformat(),
        "people": booking.people,
    }
    await repos.bookings.delete(booking)
    await audit_service.record(repos, admin_id, audit_service.DELETE, ENTITY, booking_id, snapshot)
    logger.info("booking_deleted", booking_id=booking_id)


async def activity_title(repos: Repositories, activity_id: int) -> str:
    activity = await repos.activities.get(activity_id)
    return activity.title if activity else f"Activity #{activity_id}"


def _jsonable(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in changes.items()}


def remaining_after(remaining: Optional[int], people: int) -> Optional[int]:
    return None if remaining is None else remaining - people


async def sync_booking_crm(
    repos: Repositories,
    booking_id: int,
    crm: CrmService,
    admin_id: int,
) -> tuple[Booking, CrmSyncResult]:
    """Push one booking's customer to the CRM on demand."""
    booking = await get_booking(repos, booking_id)
    result = await crm.sync_booking(booking, await activity_title(repos, booking.activity_id))
    if result.success and result.crm_id:
        booking = await repos.bookings.update(booking, {"crm_reference": result.crm_id})
    await audit_service.record(
        repos, admin_id, audit_service.MANUAL_CRM_SYNC, ENTITY, booking.id,
        {"success": result.success, "crm_id": result.crm_id, "message": result.message},
    )
    return booking, result


async def resend_notification(
    repos: Repositories,
    booking_id: int,
    notifier: WhatsAppNotifier,
    admin_id: int,
) -> NotificationResult:
    booking = await get_booking(repos, booking_id)
    event = to_event(booking, await activity_title(repos, booking.activity_id))
    result = await notifier.send_booking_notification(event, count_booking=False)
    await audit_service.record(
        repos, admin_id, audit_service.RESEND_WHATSAPP, ENTITY, booking.id,
        {"success": result.success, "results": [r.as_dict() for r in result.results]},
    )
    return result
