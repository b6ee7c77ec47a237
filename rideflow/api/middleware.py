"""Rate limiting shared by every HTTP route (slowapi, keyed by client address)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from rideflow.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    enabled=settings.rate_limit_enabled,
)


def route_limit() -> str:
    return settings.rate_limit
