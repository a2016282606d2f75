# app/middleware/rate_limiting.py - Shared slowapi limiter
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.DEFAULT_RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def setup_rate_limiting(app) -> None:
    """Apply the default limit to every route; routes may add stricter ones"""
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
