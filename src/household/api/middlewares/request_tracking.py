"""Request tracking middleware for graceful shutdown."""

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.household.core.shutdown import request_tracker

# Probes keep answering during shutdown and are not waited for
UNTRACKED_PATHS = frozenset({"/health.v1.HealthService/Check", "/metrics"})


async def request_tracking_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """Track in-flight requests for graceful shutdown."""
    if request.url.path in UNTRACKED_PATHS:
        return await call_next(request)

    async with request_tracker.track_request():
        return await call_next(request)
