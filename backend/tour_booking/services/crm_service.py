"""
CRM contact synchronization (HubSpot, Zoho).

The first configured provider wins (HubSpot before Zoho). A sync upserts the
customer as a contact keyed by phone number and returns the CRM contact id,
which is stored on the booking as ``crm_reference``. Sync never raises:
failures come back as CrmSyncResult(success=False).
"""

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from tour_booking.core.config import Settings
from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import record_crm_sync
from tour_booking.models import Booking
from tour_booking.repositories.base import RepositoryProvider
from tour_booking.services import audit_service
from tour_booking.services.events import BookingAdmitted

logger = get_logger(__name__)


@dataclass
class CrmSyncResult:
    success: bool
    crm_id: Optional[str] = None
    message: str = ""


def split_name(full_name: str) -> tuple[str, str]:
    first, _, last = full_name.strip().partition(" ")
    return first, last.strip()


class CrmIntegration(ABC):
    provider = "abstract"

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @property
    @abstractmethod
    def is_configured(self) -> bool: ...

    @abstractmethod
    async def sync_contact(self, booking: Booking, activity_name: str) -> CrmSyncResult:
        """Create or update the booking's customer as a contact."""

    @abstractmethod
    async def test_connection(self) -> CrmSyncResult: ...


class HubSpotIntegration(CrmIntegration):
    provider = "hubspot"

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], base_url: str):
        super().__init__(http)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def _find_contact_by_phone(self, phone: str) -> Optional[str]:
        response = await self.http.post(
            f"{self.base_url}/crm/v3/objects/contacts/search",
            json={
                "filterGroups": [
                    {"filters": [{"propertyName": "phone", "operator": "EQ", "value": phone}]}
                ]
            },
            headers=self._headers,
        )
        response.raise_for_status()
        results = response.json().get("results") or []
        return str(results[0]["id"]) if results else None

    async def _add_note(self, contact_id: str, content: str) -> None:
        response = await self.http.post(
            f"{self.base_url}/crm/v3/objects/notes",
            json={
                "properties": {
                    "hs_note_body": content,
                    "hs_timestamp": int(dt.datetime.now(dt.timezone.utc).timestamp() * 1000),
                },
                "associations": [
                    {
                        "to": {"id": contact_id},
                        "types": [
                            {"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": 202}
                        ],
                    }
                ],
            },
            headers=self._headers,
        )
        response.raise_for_status()

    async def sync_contact(self, booking: Booking, activity_name: str) -> CrmSyncResult:
        if not self.is_configured:
            return CrmSyncResult(success=False, message="HubSpot API key not configured")

        first, last = split_name(booking.name)
        properties = {
            "firstname": first,
            "lastname": last,
            "phone": booking.phone,
            "booking_date": booking.date.isoformat(),
            "booking_activity": activity_name,
            "booking_people": str(booking.people),
            "booking_notes": booking.notes or "",
            "booking_external_id": str(booking.id),
            "lifecyclestage": "customer",
        }

        try:
            contact_id = await self._find_contact_by_phone(booking.phone)
            if contact_id:
                response = await self.http.patch(
                    f"{self.base_url}/crm/v3/objects/contacts/{contact_id}",
                    json={"properties": properties},
                    headers=self._headers,
                )
                response.raise_for_status()
                await self._add_note(
                    contact_id,
                    f"New booking: {activity_name} on {booking.date.isoformat()} "
                    f"for {booking.people} people",
                )
                return CrmSyncResult(True, contact_id, "Contact updated in HubSpot")

            response = await self.http.post(
                f"{self.base_url}/crm/v3/objects/contacts",
                json={"properties": properties},
                headers=self._headers,
            )
            response.raise_for_status()
            return CrmSyncResult(True, str(response.json()["id"]), "Contact created in HubSpot")
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error("hubspot_sync_failed", booking_id=booking.id, error=str(e))
            return CrmSyncResult(success=False, message="Failed to sync with HubSpot")

    async def test_connection(self) -> CrmSyncResult:
        try:
            response = await self.http.get(
                f"{self.base_url}/crm/v3/objects/contacts",
                params={"limit": 1},
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            return CrmSyncResult(False, message=f"HubSpot connection failed: {e}")
        return CrmSyncResult(True, message="Successfully connected to HubSpot CRM")


class ZohoIntegration(CrmIntegration):
    provider = "zoho"

    def __init__(self, http: httpx.AsyncClient, access_token: Optional[str], base_url: str):
        super().__init__(http)
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Zoho-oauthtoken {self.access_token}"}

    async def sync_contact(self, booking: Booking, activity_name: str) -> CrmSyncResult:
        if not self.is_configured:
            return CrmSyncResult(success=False, message="Zoho access token not configured")

        first, last = split_name(booking.name)
        record = {
            "First_Name": first,
            "Last_Name": last or first,
            "Phone": booking.phone,
            "Description": (
                f"Booking #{booking.id}: {activity_name} on {booking.date.isoformat()} "
                f"for {booking.people} people. {booking.notes or ''}"
            ).strip(),
        }
        try:
            response = await self.http.post(
                f"{self.base_url}/crm/v2/Contacts/upsert",
                json={"data": [record], "duplicate_check_fields": ["Phone"]},
                headers=self._headers,
            )
            response.raise_for_status()
            entry = response.json()["data"][0]
            if entry.get("status") != "success":
                return CrmSyncResult(False, message=entry.get("message", "Zoho rejected the contact"))
            action = entry.get("action", "insert")
            verb = "updated" if action == "update" else "created"
            return CrmSyncResult(True, str(entry["details"]["id"]), f"Contact {verb} in Zoho")
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            logger.error("zoho_sync_failed", booking_id=booking.id, error=str(e))
            return CrmSyncResult(success=False, message="Failed to sync with Zoho")

    async def test_connection(self) -> CrmSyncResult:
        try:
            response = await self.http.get(f"{self.base_url}/crm/v2/org", headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            return CrmSyncResult(False, message=f"Zoho connection failed: {e}")
        return CrmSyncResult(True, message="Successfully connected to Zoho CRM")


class CrmService:
    """Picks the configured provider and tracks sync status for the dashboard."""

    def __init__(self, integrations: list[CrmIntegration]):
        self.integrations = integrations
        self.last_successful_sync: Optional[dt.datetime] = None
        self.contacts_synced = 0

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient) -> "CrmService":
        return cls([
            HubSpotIntegration(http, settings.HUBSPOT_API_KEY, settings.HUBSPOT_API_BASE_URL),
            ZohoIntegration(http, settings.ZOHO_ACCESS_TOKEN, settings.ZOHO_API_BASE_URL),
        ])

    @property
    def integration(self) -> Optional[CrmIntegration]:
        return next((i for i in self.integrations if i.is_configured), None)

    async def sync_booking(self, booking: Booking, activity_name: str) -> CrmSyncResult:
        crm = self.integration
        if crm is None:
            return CrmSyncResult(success=False, message="No CRM integration configured")

        result = await crm.sync_contact(booking, activity_name)
        record_crm_sync(crm.provider, result.success)
        if result.success:
            self.last_successful_sync = dt.datetime.now(dt.timezone.utc)
            self.contacts_synced += 1
            logger.info("crm_synced", provider=crm.provider, booking_id=booking.id, crm_id=result.crm_id)
        else:
            logger.warning("crm_sync_failed", provider=crm.provider, booking_id=booking.id, reason=result.message)
        return result

    def status(self) -> dict:
        crm = self.integration
        if crm is None:
            return {"connected": False, "error": "No CRM API keys configured"}
        return {
            "connected": True,
            "provider": crm.provider,
            "last_sync": self.last_successful_sync,
            "total_contacts": self.contacts_synced or None,
        }

    async def test_connection(self) -> CrmSyncResult:
        crm = self.integration
        if crm is None:
            return CrmSyncResult(False, message="No CRM API keys configured")
        return await crm.test_connection()


def make_crm_handler(crm: CrmService, provider: RepositoryProvider):
    """BookingAdmitted handler: sync the contact and remember its CRM id."""

    async def sync_crm(event: BookingAdmitted) -> None:
        async with provider.unit_of_work() as repos:
            booking = await repos.bookings.get(event.booking_id)
        if booking is None:
            logger.warning("crm_sync_skipped", booking_id=event.booking_id, reason="booking_missing")
            return

        # No unit of work is open here: a slow CRM must not hold a pooled connection
        result = await crm.sync_booking(booking, event.activity_title)
        if not (result.success and result.crm_id):
            return

        async with provider.unit_of_work() as repos:
            stored = await repos.bookings.get(event.booking_id)
            if stored is None:
                logger.warning("crm_reference_dropped", booking_id=event.booking_id, crm_id=result.crm_id)
                return
            await repos.bookings.update(stored, {"crm_reference": result.crm_id})
            await audit_service.record(
                repos, None, audit_service.CRM_SYNC, "booking", stored.id,
                {"crm_id": result.crm_id, "provider": crm.integration.provider},
            )

    return sync_crm
