"""
Admission strategy factory.
Configures which admission control strategy guards booking creation.
"""

from tour_booking.core.config import Settings
from tour_booking.core.logging import get_logger
from tour_booking.services.admission_service import RedisAdmission
from tour_booking.services.interfaces.admission import AdmissionStrategy
from tour_booking.services.interfaces.local_admission import LocalAdmission
from tour_booking.services.interfaces.optimistic_admission import OptimisticAdmission

logger = get_logger(__name__)


def get_admission_strategy(settings: Settings) -> AdmissionStrategy:
    """
    Build the configured admission strategy.

    ADMISSION_STRATEGY:
    - local (default): per-process asyncio locks
    - redis: cross-process Redis locks, fail open when Redis is down
    - optimistic: no serialization
    """
    strategy = settings.ADMISSION_STRATEGY.lower()

    if strategy == "redis":
        admission = RedisAdmission(
            timeout=settings.ADMISSION_LOCK_TIMEOUT,
            ttl_ms=settings.ADMISSION_LOCK_TTL_MS,
            retry_delay=settings.ADMISSION_RETRY_DELAY,
        )
    elif strategy == "optimistic":
        admission = OptimisticAdmission()
    else:
        if strategy != "local":
            logger.warning("unknown_admission_strategy", strategy=strategy, fallback="local")
        admission = LocalAdmission(timeout=settings.ADMISSION_LOCK_TIMEOUT)

    logger.info("admission_strategy_selected", strategy=admission.name)
    return admission
