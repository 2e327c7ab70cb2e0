"""
Process-local repositories for running without a database (demos, local UI work).

State lives in an injected MemoryStore, never in module globals. There are no
transactions: writes are visible immediately and rollback is a no-op.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, AsyncIterator, Optional

from tour_booking.models import Activity, AdminUser, AuditLog, Booking
from tour_booking.repositories.base import (
    ActivityRepository,
    AdminUserRepository,
    AuditLogRepository,
    BookingRepository,
    Repositories,
    RepositoryProvider,
    UnitOfWork,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _with_column_defaults(obj):
    """Fill scalar Python-side column defaults the way a flush would."""
    for column in obj.__table__.columns:
        if getattr(obj, column.key, None) is None and column.default is not None:
            if column.default.is_scalar:
                setattr(obj, column.key, column.default.arg)
    return obj


@dataclass
class MemoryStore:
    activities: dict[int, Activity] = field(default_factory=dict)
    bookings: dict[int, Booking] = field(default_factory=dict)
    audit_logs: dict[int, AuditLog] = field(default_factory=dict)
    users: dict[int, AdminUser] = field(default_factory=dict)
    _counters: dict[str, int] = field(default_factory=dict)

    def next_id(self, kind: str) -> int:
        self._counters[kind] = self._counters.get(kind, 0) + 1
        return self._counters[kind]


class MemoryActivityRepository(ActivityRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def list_all(self) -> list[Activity]:
        return [self.store.activities[k] for k in sorted(self.store.activities)]

    async def get(self, activity_id: int) -> Optional[Activity]:
        return self.store.activities.get(activity_id)

    async def count(self) -> int:
        return len(self.store.activities)

    async def create(self, data: dict[str, Any]) -> Activity:
        now = _now()
        activity = _with_column_defaults(
            Activity(id=self.store.next_id("activity"), created_at=now, updated_at=now, **data)
        )
        self.store.activities[activity.id] = activity
        return activity

    async def update(self, activity: Activity, data: dict[str, Any]) -> Activity:
        for key, value in data.items():
            setattr(activity, key, value)
        activity.updated_at = _now()
        return activity

    async def delete(self, activity: Activity) -> None:
        self.store.activities.pop(activity.id, None)


class MemoryBookingRepository(BookingRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def _matching(self, include_cancelled: bool):
        for booking in self.store.bookings.values():
            if include_cancelled or booking.status != "cancelled":
                yield booking

    async def list_all(self) -> list[Booking]:
        return sorted(
            self.store.bookings.values(),
            key=lambda b: (b.created_at, b.id),
            reverse=True,
        )

    async def get(self, booking_id: int) -> Optional[Booking]:
        return self.store.bookings.get(booking_id)

    async def create(self, data: dict[str, Any]) -> Booking:
        now = _now()
        booking = _with_column_defaults(
            Booking(id=self.store.next_id("booking"), created_at=now, updated_at=now, **data)
        )
        self.store.bookings[booking.id] = booking
        return booking

    async def update(self, booking: Booking, data: dict[str, Any]) -> Booking:
        for key, value in data.items():
            setattr(booking, key, value)
        booking.updated_at = _now()
        return booking

    async def delete(self, booking: Booking) -> None:
        self.store.bookings.pop(booking.id, None)

    async def booked_people(self, activity_id: int, day: date, include_cancelled: bool = True) -> int:
        return sum(
            b.people
            for b in self._matching(include_cancelled)
            if b.activity_id == activity_id and b.date == day
        )

    async def booked_people_by_activity(
        self, day: date, include_cancelled: bool = True
    ) -> dict[int, int]:
        totals: dict[int, int] = {}
        for b in self._matching(include_cancelled):
            if b.date == day:
                totals[b.activity_id] = totals.get(b.activity_id, 0) + b.people
        return totals

    async def booked_people_by_day(
        self, activity_id: int, start: date, end: date, include_cancelled: bool = True
    ) -> dict[date, int]:
        totals: dict[date, int] = {}
        for b in self._matching(include_cancelled):
            if b.activity_id == activity_id and start <= b.date <= end:
                totals[b.date] = totals.get(b.date, 0) + b.people
        return totals


class MemoryAuditLogRepository(AuditLogRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def create(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> AuditLog:
        entry = AuditLog(
            id=self.store.next_id("audit_log"),
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            created_at=_now(),
        )
        self.store.audit_logs[entry.id] = entry
        return entry

    async def list_all(self) -> list[AuditLog]:
        return sorted(
            self.store.audit_logs.values(),
            key=lambda e: (e.created_at, e.id),
            reverse=True,
        )


class MemoryAdminUserRepository(AdminUserRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get(self, user_id: int) -> Optional[AdminUser]:
        return self.store.users.get(user_id)

    async def get_by_username(self, username: str) -> Optional[AdminUser]:
        return next((u for u in self.store.users.values() if u.username == username), None)

    async def list_all(self) -> list[AdminUser]:
        return [self.store.users[k] for k in sorted(self.store.users)]

    async def create(self, username: str, hashed_password: str, role: str) -> AdminUser:
        now = _now()
        user = AdminUser(
            id=self.store.next_id("user"),
            username=username,
            hashed_password=hashed_password,
            role=role,
            created_at=now,
            updated_at=now,
        )
        self.store.users[user.id] = user
        return user

    async def record_login(self, user: AdminUser) -> AdminUser:
        user.last_login = _now()
        return user


class _NoTransaction(UnitOfWork):
    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


class MemoryRepositoryProvider(RepositoryProvider):
    def __init__(self, store: Optional[MemoryStore] = None):
        self.store = store or MemoryStore()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[Repositories]:
        yield Repositories(
            activities=MemoryActivityRepository(self.store),
            bookings=MemoryBookingRepository(self.store),
            audit_logs=MemoryAuditLogRepository(self.store),
            users=MemoryAdminUserRepository(self.store),
            unit=_NoTransaction(),
        )
