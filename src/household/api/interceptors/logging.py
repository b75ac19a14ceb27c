"""RPC logging interceptor - one log line per call, authenticated or not."""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.household.api.interceptors.auth import INFRASTRUCTURE_PATHS
from src.household.core.logging import get_logger

logger = get_logger(__name__)


class RpcLoggingInterceptor(BaseHTTPMiddleware):
    """Logs procedure, caller, duration and outcome of every RPC call.

    Sits outside the auth interceptor, so the caller is read back from
    ``request.state.auth`` after the call returns.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        procedure = request.url.path
        if procedure in INFRASTRUCTURE_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "RPC call failed",
                procedure=procedure,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                outcome="error",
                **_caller(request),
            )
            raise

        outcome = "success" if response.status_code < 400 else "error"
        log = logger.info if outcome == "success" else logger.warning
        log(
            "RPC call",
            procedure=procedure,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            status_code=response.status_code,
            outcome=outcome,
            **_caller(request),
        )
        return response


def _caller(request: Request) -> dict[str, str | None]:
    auth = getattr(request.state, "auth", None)
    if auth is None:
        return {"user_id": None, "family_id": None}
    return {"user_id": auth.user_id, "family_id": auth.family_id}
