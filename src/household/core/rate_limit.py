"""Rate limiting for the unauthenticated auth procedures.

Limits are kept in process memory and keyed by client IP. They are disabled
when running the test suite.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.household.core.config import get_settings


def get_rate_limit_key(request: Request) -> str:
    """Key rate limits by client IP only, never by a client-chosen header."""
    return get_remote_address(request) or "unknown"


def _create_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=get_rate_limit_key,
        storage_uri="memory://",
        enabled=not settings.is_testing,
    )


limiter = _create_limiter()
