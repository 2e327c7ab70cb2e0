"""
Rate limiter configuration module.
Separated to avoid circular imports between main and route modules.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tour_booking.core.config import get_settings

settings = get_settings()

# Every route gets the default limit through SlowAPIMiddleware
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
