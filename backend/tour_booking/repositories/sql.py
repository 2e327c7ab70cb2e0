"""
SQLAlchemy-backed repositories.

Writes flush and refresh so server-side defaults (timestamps) are loaded
before the instance leaves the repository; the async session cannot lazy
load expired attributes later.
"""

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Any, AsyncIterator, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

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


class _SqlRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _apply(self, obj, data: dict[str, Any]):
        for field, value in data.items():
            setattr(obj, field, value)
        return await self._save(obj)


class SqlActivityRepository(_SqlRepository, ActivityRepository):
    async def list_all(self) -> list[Activity]:
        result = await self.db.execute(select(Activity).order_by(Activity.id.asc()))
        return list(result.scalars().all())

    async def get(self, activity_id: int) -> Optional[Activity]:
        return await self.db.get(Activity, activity_id)

    async def count(self) -> int:
        return (await self.db.execute(select(func.count(Activity.id)))).scalar_one()

    async def create(self, data: dict[str, Any]) -> Activity:
        return await self._save(Activity(**data))

    async def update(self, activity: Activity, data: dict[str, Any]) -> Activity:
        return await self._apply(activity, data)

    async def delete(self, activity: Activity) -> None:
        await self.db.delete(activity)
        await self.db.flush()


class SqlBookingRepository(_SqlRepository, BookingRepository):
    async def list_all(self) -> list[Booking]:
        result = await self.db.execute(
            select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, booking_id: int) -> Optional[Booking]:
        return await self.db.get(Booking, booking_id)

    async def create(self, data: dict[str, Any]) -> Booking:
        return await self._save(Booking(**data))

    async def update(self, booking: Booking, data: dict[str, Any]) -> Booking:
        return await self._apply(booking, data)

    async def delete(self, booking: Booking) -> None:
        await self.db.delete(booking)
        await self.db.flush()

    async def booked_people(self, activity_id: int, day: date, include_cancelled: bool = True) -> int:
        query = select(func.coalesce(func.sum(Booking.people), 0)).where(
            Booking.activity_id == activity_id,
            Booking.date == day,
        )
        if not include_cancelled:
            query = query.where(Booking.status != "cancelled")
        return int((await self.db.execute(query)).scalar_one())

    async def booked_people_by_activity(
        self, day: date, include_cancelled: bool = True
    ) -> dict[int, int]:
        query = (
            select(Booking.activity_id, func.sum(Booking.people))
            .where(Booking.date == day)
            .group_by(Booking.activity_id)
        )
        if not include_cancelled:
            query = query.where(Booking.status != "cancelled")
        result = await self.db.execute(query)
        return {activity_id: int(total) for activity_id, total in result.all()}

    async def booked_people_by_day(
        self, activity_id: int, start: date, end: date, include_cancelled: bool = True
    ) -> dict[date, int]:
        query = (
            select(Booking.date, func.sum(Booking.people))
            .where(
                Booking.activity_id == activity_id,
                Booking.date >= start,
                Booking.date <= end,
            )
            .group_by(Booking.date)
        )
        if not include_cancelled:
            query = query.where(Booking.status != "cancelled")
        result = await self.db.execute(query)
        return {day: int(total) for day, total in result.all()}


class SqlAuditLogRepository(_SqlRepository, AuditLogRepository):
    async def create(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> AuditLog:
        return await self._save(
            AuditLog(
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details,
            )
        )

    async def list_all(self) -> list[AuditLog]:
        result = await self.db.execute(
            select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        )
        return list(result.scalars().all())


class SqlAdminUserRepository(_SqlRepository, AdminUserRepository):
    async def get(self, user_id: int) -> Optional[AdminUser]:
        return await self.db.get(AdminUser, user_id)

    async def get_by_username(self, username: str) -> Optional[AdminUser]:
        result = await self.db.execute(select(AdminUser).where(AdminUser.username == username))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[AdminUser]:
        result = await self.db.execute(select(AdminUser).order_by(AdminUser.id.asc()))
        return list(result.scalars().all())

    async def create(self, username: str, hashed_password: str, role: str) -> AdminUser:
        return await self._save(
            AdminUser(username=username, hashed_password=hashed_password, role=role)
        )

    async def record_login(self, user: AdminUser) -> AdminUser:
        return await self._apply(user, {"last_login": datetime.now(timezone.utc)})


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


class SqlRepositoryProvider(RepositoryProvider):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self.session_factory = session_factory
        self.engine = engine

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[Repositories]:
        async with self.session_factory() as session:
            unit = SqlUnitOfWork(session)
            repos = Repositories(
                activities=SqlActivityRepository(session),
                bookings=SqlBookingRepository(session),
                audit_logs=SqlAuditLogRepository(session),
                users=SqlAdminUserRepository(session),
                unit=unit,
            )
            try:
                yield repos
                await unit.commit()
            except BaseException:
                await unit.rollback()
                raise

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
