"""
WhatsApp booking notifications via Twilio.

Admins are messaged one after another in configured order with a short
pause between sends; the customer gets a confirmation only if at least one
admin was reached. Every outcome feeds NotificationStats, which backs the
admin dashboard. Missing credentials are not an error: the message is
logged instead of sent.
"""

import asyncio
import datetime as dt
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

import httpx

from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import record_whatsapp
from tour_booking.infrastructure.twilio_client import TwilioClient
from tour_booking.services.events import BookingAdmitted

logger = get_logger(__name__)


@dataclass
class SendResult:
    recipient: str
    success: bool
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {"recipient": self.recipient, "success": self.success, "error": self.error}


@dataclass
class NotificationResult:
    success: bool
    results: list[SendResult] = field(default_factory=list)


class NotificationStats:
    """Per-process counters for the notification dashboard."""

    def __init__(self, admins: Optional[list[str]] = None):
        self.total_messages_sent = 0
        self.total_messages_failed = 0
        self.total_bookings = 0
        self.last_sent_at: Optional[dt.datetime] = None
        self.messages_per_admin: dict[str, dict[str, int]] = {
            name: {"sent": 0, "failed": 0} for name in (admins or [])
        }

    def track_success(self, admin: str) -> None:
        self.total_messages_sent += 1
        self.last_sent_at = dt.datetime.now(dt.timezone.utc)
        self.messages_per_admin.setdefault(admin, {"sent": 0, "failed": 0})["sent"] += 1

    def track_failure(self, admin: str) -> None:
        self.total_messages_failed += 1
        self.messages_per_admin.setdefault(admin, {"sent": 0, "failed": 0})["failed"] += 1

    def track_booking(self) -> None:
        self.total_bookings += 1

    def snapshot(self) -> dict:
        return {
            "total_messages_sent": self.total_messages_sent,
            "total_messages_failed": self.total_messages_failed,
            "total_bookings": self.total_bookings,
            "last_sent_at": self.last_sent_at,
            "messages_per_admin": {k: dict(v) for k, v in self.messages_per_admin.items()},
        }


def format_booking_message(event: BookingAdmitted) -> str:
    return (
        "📢 *New Booking Received*\n\n"
        f"👤 Name: {event.name}\n"
        f"📞 Phone: {event.phone}\n"
        f"🎯 Activity: {event.activity_title}\n"
        f"📅 Date: {event.date.isoformat()}\n"
        f"👥 People: {event.people}\n"
        f"📝 Notes: {event.notes or 'No notes provided.'}"
    )


def format_client_confirmation(event: BookingAdmitted) -> str:
    return (
        f"✅ Hello {event.name}, your booking for {event.activity_title} "
        f"on {event.date.isoformat()} was received!\n"
        "We will contact you shortly to confirm all details."
    )


class WhatsAppNotifier:
    def __init__(
        self,
        twilio: TwilioClient,
        admin_numbers: dict[str, str],
        stats: NotificationStats,
        delay_seconds: float = 1.0,
        client_delay_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.twilio = twilio
        self.admin_numbers = admin_numbers
        self.stats = stats
        self.delay_seconds = delay_seconds
        self.client_delay_seconds = client_delay_seconds
        self._sleep = sleep

    async def _send(self, recipient: str, to: str, body: str) -> SendResult:
        try:
            await self.twilio.send_whatsapp(to, body)
        except (httpx.HTTPError, ValueError) as e:
            record_whatsapp(recipient, sent=False)
            logger.warning("whatsapp_send_failed", recipient=recipient, error=str(e))
            return SendResult(recipient=recipient, success=False, error=str(e))
        record_whatsapp(recipient, sent=True)
        logger.info("whatsapp_sent", recipient=recipient)
        return SendResult(recipient=recipient, success=True)

    async def send_booking_notification(
        self, event: BookingAdmitted, count_booking: bool = True
    ) -> NotificationResult:
        if count_booking:
            self.stats.track_booking()
        body = format_booking_message(event)

        if not self.twilio.is_configured:
            logger.info(
                "whatsapp_disabled",
                reason="twilio_credentials_missing",
                would_notify=list(self.admin_numbers),
                message=body,
            )
            return NotificationResult(success=False)

        results: list[SendResult] = []
        names = list(self.admin_numbers)
        for index, admin in enumerate(names):
            result = await self._send(admin, self.admin_numbers[admin], body)
            if result.success:
                self.stats.track_success(admin)
            else:
                self.stats.track_failure(admin)
            results.append(result)
            if index < len(names) - 1:
                await self._sleep(self.delay_seconds)

        any_success = any(r.success for r in results)
        if any_success:
            await self._sleep(self.client_delay_seconds)
            results.append(
                await self._send("client", event.phone, format_client_confirmation(event))
            )

        logger.info(
            "booking_notification_finished",
            booking_id=event.booking_id,
            admins_reached=sum(1 for r in results[: len(names)] if r.success),
            success=any_success,
        )
        return NotificationResult(success=any_success, results=results)


def make_notification_handler(notifier: WhatsAppNotifier):
    async def notify_admins(event: BookingAdmitted) -> None:
        await notifier.send_booking_notification(event)

    return notify_admins
