"""
Tests for WhatsApp notifications and CRM sync against mocked HTTP APIs.
"""

import json
from datetime import date
from urllib.parse import parse_qs

import httpx
import pytest
from httpx import AsyncClient

from tour_booking.infrastructure.twilio_client import TwilioClient
from tour_booking.models import Booking
from tour_booking.services.crm_service import (
    CrmIntegration,
    CrmService,
    CrmSyncResult,
    HubSpotIntegration,
    ZohoIntegration,
    make_crm_handler,
)
from tour_booking.services.events import BookingAdmitted
from tour_booking.services.notification_service import (
    NotificationStats,
    WhatsAppNotifier,
    format_booking_message,
)

EVENT = BookingAdmitted(
    booking_id=7,
    activity_id=2,
    activity_title="Agafay Combo",
    name="Fatima Zahra",
    phone="+212612345678",
    date=date(2025, 6, 10),
    people=3,
    notes=None,
)


async def no_sleep(seconds: float) -> None:
    return None


def _booking(**overrides) -> Booking:
    data = {
        "id": 7,
        "name": "Fatima Zahra",
        "phone": "+212612345678",
        "activity_id": 2,
        "date": date(2025, 6, 10),
        "people": 3,
        "notes": "Vegetarian",
        "status": "pending",
    }
    data.update(overrides)
    return Booking(**data)


def test_booking_message_contents():
    message = format_booking_message(EVENT)
    assert "Fatima Zahra" in message
    assert "Agafay Combo" in message
    assert "2025-06-10" in message
    assert "No notes provided." in message


@pytest.mark.asyncio
async def test_notifies_admins_in_order_then_client(notifier, twilio_requests):
    result = await notifier.send_booking_notification(EVENT)

    assert result.success
    recipients = [parse_qs(r.content.decode())["To"][0] for r in twilio_requests]
    assert recipients == [
        "whatsapp:+212600000001",
        "whatsapp:+212600000002",
        "whatsapp:+212612345678",
    ]
    assert twilio_requests[0].url.path == "/2010-04-01/Accounts/AC123/Messages.json"

    stats = notifier.stats.snapshot()
    assert stats["total_messages_sent"] == 2
    assert stats["total_bookings"] == 1
    assert stats["messages_per_admin"]["Ahmed"] == {"sent": 1, "failed": 0}


@pytest.mark.asyncio
async def test_partial_admin_failure_still_confirms_client():
    def handler(request: httpx.Request) -> httpx.Response:
        to = parse_qs(request.content.decode())["To"][0]
        if to.endswith("0001"):
            return httpx.Response(400, json={"message": "unverified number"})
        return httpx.Response(201, json={"sid": "SM1"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        notifier = WhatsAppNotifier(
            TwilioClient(http, "AC123", "secret", "whatsapp:+14155238886"),
            admin_numbers={"Ahmed": "+212600000001", "Yahia": "+212600000002"},
            stats=NotificationStats(["Ahmed", "Yahia"]),
            sleep=no_sleep,
        )
        result = await notifier.send_booking_notification(EVENT)

    assert result.success
    assert [(r.recipient, r.success) for r in result.results] == [
        ("Ahmed", False),
        ("Yahia", True),
        ("client", True),
    ]
    stats = notifier.stats.snapshot()
    assert stats["total_messages_failed"] == 1
    assert stats["messages_per_admin"]["Ahmed"] == {"sent": 0, "failed": 1}


@pytest.mark.asyncio
async def test_all_admins_failing_skips_client():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        notifier = WhatsAppNotifier(
            TwilioClient(http, "AC123", "secret", "whatsapp:+14155238886"),
            admin_numbers={"Ahmed": "+212600000001"},
            stats=NotificationStats(["Ahmed"]),
            sleep=no_sleep,
        )
        result = await notifier.send_booking_notification(EVENT)

    assert not result.success
    assert [r.recipient for r in result.results] == ["Ahmed"]


@pytest.mark.asyncio
async def test_missing_credentials_logs_instead_of_sending():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        notifier = WhatsAppNotifier(
            TwilioClient(http, None, None, "whatsapp:+14155238886"),
            admin_numbers={"Ahmed": "+212600000001"},
            stats=NotificationStats(["Ahmed"]),
            sleep=no_sleep,
        )
        result = await notifier.send_booking_notification(EVENT)

    assert not result.success
    assert result.results == []
    assert notifier.stats.snapshot()["total_bookings"] == 1


@pytest.mark.asyncio
async def test_notification_stats_endpoint(client: AsyncClient, notifier, staff_headers):
    await notifier.send_booking_notification(EVENT)

    response = await client.get("/api/admin/notification-stats", headers=staff_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["totalMessagesSent"] == 2
    assert data["messagesPerAdmin"]["Yahia"] == {"sent": 1, "failed": 0}
    assert data["lastSentAt"] is not None


@pytest.mark.asyncio
async def test_hubspot_creates_new_contact():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path))
        if request.url.path.endswith("/search"):
            return httpx.Response(200, json={"results": []})
        body = json.loads(request.content)
        assert body["properties"]["firstname"] == "Fatima"
        assert body["properties"]["lastname"] == "Zahra"
        return httpx.Response(201, json={"id": "501"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        hubspot = HubSpotIntegration(http, "pat-123", "https://api.hubapi.com")
        result = await hubspot.sync_contact(_booking(), "Agafay Combo")

    assert result.success
    assert result.crm_id == "501"
    assert calls == [
        ("POST", "/crm/v3/objects/contacts/search"),
        ("POST", "/crm/v3/objects/contacts"),
    ]


@pytest.mark.asyncio
async def test_hubspot_updates_existing_contact_and_adds_note():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path))
        if request.url.path.endswith("/search"):
            return httpx.Response(200, json={"results": [{"id": "77"}]})
        if request.url.path.endswith("/notes"):
            body = json.loads(request.content)
            assert body["associations"][0]["to"] == {"id": "77"}
            return httpx.Response(201, json={"id": "n1"})
        return httpx.Response(200, json={"id": "77"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        hubspot = HubSpotIntegration(http, "pat-123", "https://api.hubapi.com")
        result = await hubspot.sync_contact(_booking(), "Agafay Combo")

    assert result.success
    assert result.crm_id == "77"
    assert ("PATCH", "/crm/v3/objects/contacts/77") in calls
    assert ("POST", "/crm/v3/objects/notes") in calls


@pytest.mark.asyncio
async def test_hubspot_failure_is_a_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "bad token"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        hubspot = HubSpotIntegration(http, "pat-123", "https://api.hubapi.com")
        result = await hubspot.sync_contact(_booking(), "Agafay Combo")

    assert not result.success
    assert result.message == "Failed to sync with HubSpot"


@pytest.mark.asyncio
async def test_zoho_upsert():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/crm/v2/Contacts/upsert"
        assert request.headers["Authorization"] == "Zoho-oauthtoken zoho-token"
        return httpx.Response(
            200,
            json={"data": [{"status": "success", "action": "update", "details": {"id": "900"}}]},
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        zoho = ZohoIntegration(http, "zoho-token", "https://www.zohoapis.com")
        result = await zoho.sync_contact(_booking(), "Agafay Combo")

    assert result.success
    assert result.crm_id == "900"
    assert result.message == "Contact updated in Zoho"


@pytest.mark.asyncio
async def test_crm_service_prefers_first_configured_provider():
    async with httpx.AsyncClient() as http:
        service = CrmService([
            HubSpotIntegration(http, None, "https://api.hubapi.com"),
            ZohoIntegration(http, "zoho-token", "https://www.zohoapis.com"),
        ])

        assert service.integration.provider == "zoho"
        assert service.status() == {
            "connected": True,
            "provider": "zoho",
            "last_sync": None,
            "total_contacts": None,
        }


@pytest.mark.asyncio
async def test_crm_handler_stores_reference_and_audits(provider, make_activity):
    activity = await make_activity()
    async with provider.unit_of_work() as repos:
        booking = await repos.bookings.create({
            "name": "Fatima Zahra",
            "phone": "+212612345678",
            "activity_id": activity.id,
            "date": date(2025, 6, 10),
            "people": 2,
        })

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/search"):
            return httpx.Response(200, json={"results": []})
        return httpx.Response(201, json={"id": "501"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        crm = CrmService([HubSpotIntegration(http, "pat-123", "https://api.hubapi.com")])
        sync_crm = make_crm_handler(crm, provider)
        await sync_crm(BookingAdmitted(
            booking_id=booking.id,
            activity_id=activity.id,
            activity_title=activity.title,
            name=booking.name,
            phone=booking.phone,
            date=booking.date,
            people=booking.people,
        ))

    async with provider.unit_of_work() as repos:
        stored = await repos.bookings.get(booking.id)
        logs = await repos.audit_logs.list_all()

    assert stored.crm_reference == "501"
    assert logs[0].action == "CRM_SYNC"
    assert logs[0].user_id is None
    assert crm.status()["total_contacts"] == 1


@pytest.mark.asyncio
async def test_crm_status_endpoints(client: AsyncClient, staff_headers):
    status_response = await client.get("/api/crm/status")
    assert status_response.json() == {
        "connected": False,
        "provider": None,
        "lastSync": None,
        "totalContacts": None,
        "error": "No CRM API keys configured",
    }

    test_response = await client.post("/api/crm/test", headers=staff_headers)
    assert test_response.json() == {"success": False, "message": "No CRM API keys configured"}


class PoolWatchingCrm(CrmIntegration):
    """Records how many DB connections are checked out while the CRM call runs."""

    provider = "hubspot"

    def __init__(self, engine):
        self.engine = engine
        self.checked_out = []

    @property
    def is_configured(self) -> bool:
        return True

    async def sync_contact(self, booking, activity_name):
        self.checked_out.append(self.engine.sync_engine.pool.checkedout())
        return CrmSyncResult(True, crm_id="901", message="Contact created in HubSpot")

    async def test_connection(self):
        return CrmSyncResult(True, message="ok")


@pytest.mark.asyncio
async def test_crm_handler_releases_connection_during_sync(provider, make_activity):
    activity = await make_activity()
    async with provider.unit_of_work() as repos:
        booking = await repos.bookings.create({
            "name": "Youssef Amrani",
            "phone": "+212611111111",
            "activity_id": activity.id,
            "date": date(2025, 6, 10),
            "people": 1,
        })

    integration = PoolWatchingCrm(provider.engine)
    sync_crm = make_crm_handler(CrmService([integration]), provider)
    await sync_crm(BookingAdmitted(
        booking_id=booking.id,
        activity_id=activity.id,
        activity_title=activity.title,
        name=booking.name,
        phone=booking.phone,
        date=booking.date,
        people=booking.people,
    ))

    assert integration.checked_out == [0]
    async with provider.unit_of_work() as repos:
        stored = await repos.bookings.get(booking.id)
    assert stored.crm_reference == "901"
