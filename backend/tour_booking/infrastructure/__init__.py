"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .redis_client import close_redis, get_redis
from .twilio_client import TwilioClient

__all__ = ['get_redis', 'close_redis', 'TwilioClient']
