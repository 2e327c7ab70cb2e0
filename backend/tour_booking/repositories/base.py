"""
Repository interfaces.

Services depend on these abstractions only; a RepositoryProvider hands out a
Repositories bundle per unit of work (one request, one background handler).
Both backends return the ORM model instances as the canonical domain types.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from tour_booking.models import Activity, AdminUser, AuditLog, Booking


class ActivityRepository(ABC):
    @abstractmethod
    async def list_all(self) -> list[Activity]: ...

    @abstractmethod
    async def get(self, activity_id: int) -> Optional[Activity]: ...

    @abstractmethod
    async def count(self) -> int: ...

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> Activity: ...

    @abstractmethod
    async def update(self, activity: Activity, data: dict[str, Any]) -> Activity: ...

    @abstractmethod
    async def delete(self, activity: Activity) -> None: ...


class BookingRepository(ABC):
    @abstractmethod
    async def list_all(self) -> list[Booking]:
        """All bookings, newest first."""

    @abstractmethod
    async def get(self, booking_id: int) -> Optional[Booking]: ...

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> Booking: ...

    @abstractmethod
    async def update(self, booking: Booking, data: dict[str, Any]) -> Booking: ...

    @abstractmethod
    async def delete(self, booking: Booking) -> None: ...

    @abstractmethod
    async def booked_people(self, activity_id: int, day: date, include_cancelled: bool = True) -> int:
        """Sum of party sizes booked for one activity on one calendar day."""

    @abstractmethod
    async def booked_people_by_activity(
        self, day: date, include_cancelled: bool = True
    ) -> dict[int, int]:
        """activity_id -> booked people, for every activity with bookings on ``day``."""

    @abstractmethod
    async def booked_people_by_day(
        self, activity_id: int, start: date, end: date, include_cancelled: bool = True
    ) -> dict[date, int]:
        """day -> booked people for one activity, ``start`` and ``end`` inclusive."""


class AuditLogRepository(ABC):
    @abstractmethod
    async def create(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> AuditLog: ...

    @abstractmethod
    async def list_all(self) -> list[AuditLog]:
        """All audit entries, newest first."""


class AdminUserRepository(ABC):
    @abstractmethod
    async def get(self, user_id: int) -> Optional[AdminUser]: ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[AdminUser]: ...

    @abstractmethod
    async def list_all(self) -> list[AdminUser]: ...

    @abstractmethod
    async def create(self, username: str, hashed_password: str, role: str) -> AdminUser: ...

    @abstractmethod
    async def record_login(self, user: AdminUser) -> AdminUser: ...


@dataclass
class Repositories:
    activities: ActivityRepository
    bookings: BookingRepository
    audit_logs: AuditLogRepository
    users: AdminUserRepository
    unit: "UnitOfWork"

    async def commit(self) -> None:
        await self.unit.commit()


class UnitOfWork(ABC):
    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...


class RepositoryProvider(ABC):
    """Factory for units of work. Commits on clean exit, rolls back on error."""

    @abstractmethod
    def unit_of_work(self) -> AbstractAsyncContextManager[Repositories]: ...

    async def close(self) -> None:
        """Release backend resources on shutdown."""
