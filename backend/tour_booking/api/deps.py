"""
Request dependencies. Long-lived collaborators are built in the lifespan
and kept on ``app.state``; tests replace them via dependency_overrides.
"""

from typing import AsyncIterator

from fastapi import Depends, Request

from tour_booking.repositories.base import Repositories, RepositoryProvider
from tour_booking.services.crm_service import CrmService
from tour_booking.services.events import EventDispatcher
from tour_booking.services.interfaces.admission import AdmissionStrategy
from tour_booking.services.notification_service import WhatsAppNotifier


def get_provider(request: Request) -> RepositoryProvider:
    return request.app.state.provider


async def get_repositories(
    provider: RepositoryProvider = Depends(get_provider),
) -> AsyncIterator[Repositories]:
    """One unit of work per request: committed on success, rolled back on error."""
    async with provider.unit_of_work() as repos:
        yield repos


def get_admission(request: Request) -> AdmissionStrategy:
    return request.app.state.admission


def get_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.dispatcher


def get_notifier(request: Request) -> WhatsAppNotifier:
    return request.app.state.notifier


def get_crm(request: Request) -> CrmService:
    return request.app.state.crm
