"""
Storage layer. Services see only the interfaces in ``base``.
"""

from tour_booking.core.config import Settings
from tour_booking.db.session import create_engine, create_session_factory

from .base import (
    ActivityRepository,
    AdminUserRepository,
    AuditLogRepository,
    BookingRepository,
    Repositories,
    RepositoryProvider,
)
from .memory import MemoryRepositoryProvider, MemoryStore
from .sql import SqlRepositoryProvider


def build_repository_provider(settings: Settings) -> RepositoryProvider:
    """Select the storage backend from STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "memory":
        return MemoryRepositoryProvider(MemoryStore())
    engine = create_engine(settings)
    return SqlRepositoryProvider(create_session_factory(engine), engine=engine)


__all__ = [
    'ActivityRepository', 'AdminUserRepository', 'AuditLogRepository', 'BookingRepository',
    'Repositories', 'RepositoryProvider', 'MemoryRepositoryProvider', 'MemoryStore',
    'SqlRepositoryProvider', 'build_repository_provider',
]
