"""Error types and exception handlers.

Two layers of errors exist:

- Application errors (``AppError`` subclasses) carry a stable ``code`` and a
  human-readable ``message``. Services raise them; the auth RPC surface embeds
  them in its response payload.
- Transport errors (``ConnectError``) carry a Connect status code and are
  rendered as ``{"code", "message", "request_id"}`` with the matching HTTP status.

Infrastructure failures are logged once here and rendered as ``internal`` with a
fixed message, so driver or SQL text never reaches a client.
"""

from enum import StrEnum

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.household.core.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class Code(StrEnum):
    """Connect protocol status codes used by this service."""

    CANCELED = "canceled"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    UNAUTHENTICATED = "unauthenticated"


HTTP_STATUS_BY_CODE: dict[Code, int] = {
    Code.CANCELED: 499,
    Code.INVALID_ARGUMENT: 400,
    Code.NOT_FOUND: 404,
    Code.ALREADY_EXISTS: 409,
    Code.PERMISSION_DENIED: 403,
    Code.RESOURCE_EXHAUSTED: 429,
    Code.FAILED_PRECONDITION: 400,
    Code.UNIMPLEMENTED: 501,
    Code.INTERNAL: 500,
    Code.UNAVAILABLE: 503,
    Code.UNAUTHENTICATED: 401,
}

_CODE_BY_HTTP_STATUS: dict[int, Code] = {
    400: Code.INVALID_ARGUMENT,
    401: Code.UNAUTHENTICATED,
    403: Code.PERMISSION_DENIED,
    404: Code.NOT_FOUND,
    405: Code.UNIMPLEMENTED,
    409: Code.ALREADY_EXISTS,
    429: Code.RESOURCE_EXHAUSTED,
    503: Code.UNAVAILABLE,
}


class ConnectError(Exception):
    """Transport-level RPC failure."""

    def __init__(self, code: Code, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]


class AppError(Exception):
    """Application error with a stable code and a client-safe message."""

    def __init__(self, code: str, message: str, status: Code = Code.INVALID_ARGUMENT):
        super().__init__(message)
        self.code = code
        self.message = message
        # Transport status used when the error escapes a handler
        self.status = status

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class AuthError(AppError):
    """Registration, login and session failures."""


class FamilyError(AppError):
    """Family lifecycle and membership failures."""


class NotFoundError(AppError):
    """A tenant-scoped record does not exist."""


class ProvisioningError(Exception):
    """The remote database service failed to create or delete a tenant database."""


class TenantNotFound(Exception):
    """No family row, or no recorded database URL, for a family id."""

    def __init__(self, family_id: str):
        super().__init__(f"no tenant database recorded for family {family_id}")
        self.family_id = family_id


def connect_error_response(code: Code, message: str) -> JSONResponse:
    """Render a Connect error body with the current request id."""
    return JSONResponse(
        status_code=HTTP_STATUS_BY_CODE[code],
        content={
            "code": code.value,
            "message": message,
            "request_id": correlation_id.get(),
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that render Connect errors with request_id."""

    @app.exception_handler(ConnectError)
    async def connect_exception_handler(request: Request, exc: ConnectError) -> JSONResponse:
        return connect_error_response(exc.code, exc.message)

    @app.exception_handler(AppError)
    async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
        return connect_error_response(exc.status, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"Invalid request: {location} {errors[0].get('msg', '')}".strip()
        return connect_error_response(Code.INVALID_ARGUMENT, message)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exception_handler(
        request: Request, exc: RateLimitExceeded
    ) -> JSONResponse:
        return connect_error_response(Code.RESOURCE_EXHAUSTED, "Too many requests")

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = _CODE_BY_HTTP_STATUS.get(exc.status_code, Code.INTERNAL)
        return connect_error_response(code, str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return connect_error_response(Code.INTERNAL, INTERNAL_ERROR_MESSAGE)

