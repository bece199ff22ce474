from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.config import settings

# Keyed by client address; Gemini calls are the expensive path
limiter = Limiter(key_func=get_remote_address)

AI_LIMIT = settings.AI_RATE_LIMIT
LOGIN_LIMIT = "5/minute"

__all__ = [
    "limiter",
    "AI_LIMIT",
    "LOGIN_LIMIT",
    "RateLimitExceeded",
    "SlowAPIMiddleware",
]
