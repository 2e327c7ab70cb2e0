"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite file database (aiosqlite) with the schema
created from the models. ASGITransport does not run the lifespan, so the
app.state collaborators are supplied through dependency overrides.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEFAULT_ACTIVITIES"] = "false"
os.environ["STORAGE_BACKEND"] = "sql"

from typing import AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tour_booking.api.deps import get_admission, get_crm, get_dispatcher, get_notifier, get_provider
from tour_booking.core.config import get_settings
from tour_booking.core.security import ROLE_ADMIN, ROLE_SUPERADMIN, create_access_token, hash_password
from tour_booking.db.base import Base
from tour_booking.db.session import create_engine, create_session_factory
from tour_booking.infrastructure.twilio_client import TwilioClient
from tour_booking.main import app
from tour_booking.models import Activity, AdminUser
from tour_booking.repositories import MemoryRepositoryProvider, MemoryStore, SqlRepositoryProvider
from tour_booking.services.crm_service import CrmService
from tour_booking.services.events import BookingAdmitted, EventDispatcher
from tour_booking.services.interfaces.local_admission import LocalAdmission
from tour_booking.services.notification_service import NotificationStats, WhatsAppNotifier

ADMIN_PASSWORD = "correct-horse-battery"


async def no_sleep(seconds: float) -> None:
    return None


@pytest_asyncio.fixture
async def provider(tmp_path) -> AsyncGenerator[SqlRepositoryProvider, None]:
    """SQL provider over a fresh SQLite file database."""
    engine = create_engine(get_settings(), url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sql_provider = SqlRepositoryProvider(create_session_factory(engine), engine=engine)
    yield sql_provider
    await sql_provider.close()


@pytest.fixture
def memory_provider() -> MemoryRepositoryProvider:
    return MemoryRepositoryProvider(MemoryStore())


@pytest.fixture
def admitted_events() -> list[BookingAdmitted]:
    return []


@pytest.fixture
def dispatcher(admitted_events) -> EventDispatcher:
    """Dispatcher with a recording handler instead of WhatsApp/CRM."""
    events = EventDispatcher()

    async def record_event(event: BookingAdmitted) -> None:
        admitted_events.append(event)

    events.subscribe(BookingAdmitted, record_event)
    return events


@pytest.fixture
def admission() -> LocalAdmission:
    return LocalAdmission(timeout=5.0)


@pytest.fixture
def twilio_requests() -> list[httpx.Request]:
    return []


@pytest_asyncio.fixture
async def notifier(twilio_requests) -> AsyncGenerator[WhatsAppNotifier, None]:
    """Notifier whose Twilio calls are answered by an httpx.MockTransport."""

    def handler(request: httpx.Request) -> httpx.Response:
        twilio_requests.append(request)
        return httpx.Response(201, json={"sid": f"SM{len(twilio_requests)}"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        twilio = TwilioClient(http, "AC123", "secret", "whatsapp:+14155238886")
        admins = {"Ahmed": "+212600000001", "Yahia": "+212600000002"}
        yield WhatsAppNotifier(
            twilio,
            admin_numbers=admins,
            stats=NotificationStats(list(admins)),
            sleep=no_sleep,
        )


@pytest.fixture
def crm() -> CrmService:
    return CrmService([])


@pytest_asyncio.fixture
async def client(
    provider, admission, dispatcher, notifier, crm
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the app's collaborators replaced by test instances."""
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_admission] = lambda: admission
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_crm] = lambda: crm

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await dispatcher.drain()
    app.dependency_overrides.clear()


async def _create_admin(provider, username: str, role: str) -> AdminUser:
    async with provider.unit_of_work() as repos:
        return await repos.users.create(
            username=username,
            hashed_password=hash_password(ADMIN_PASSWORD),
            role=role,
        )


def _headers_for(user: AdminUser) -> dict:
    token, _ = create_access_token(
        data={"sub": str(user.id), "username": user.username, "role": user.role}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def superadmin(provider) -> AdminUser:
    return await _create_admin(provider, "owner", ROLE_SUPERADMIN)


@pytest_asyncio.fixture
async def staff_admin(provider) -> AdminUser:
    return await _create_admin(provider, "staff", ROLE_ADMIN)


@pytest.fixture
def auth_headers(superadmin) -> dict:
    """Authorization headers for a superadmin."""
    return _headers_for(superadmin)


@pytest.fixture
def staff_headers(staff_admin) -> dict:
    return _headers_for(staff_admin)


@pytest.fixture
def make_activity(provider):
    """Factory creating an activity; max_group_size=None means unlimited."""

    async def factory(
        title: str = "Agafay Combo",
        max_group_size: Optional[int] = 10,
        **overrides,
    ) -> Activity:
        data = {
            "title": title,
            "description": "Camel rides and dinner in the Agafay desert.",
            "price": 450,
            "image": "/attached_assets/agafaypack.jpeg",
            "max_group_size": max_group_size,
        }
        data.update(overrides)
        async with provider.unit_of_work() as repos:
            return await repos.activities.create(data)

    return factory
