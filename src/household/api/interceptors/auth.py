"""Auth interceptor - gates every RPC procedure behind a valid session."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.household.api.context import AuthContext, clear_auth_context, set_auth_context
from src.household.core.db import TenantRegistry, get_session
from src.household.core.exceptions import INTERNAL_ERROR_MESSAGE, Code, connect_error_response
from src.household.core.logging import bind_user_context, get_logger
from src.household.services.auth_service import AuthService

logger = get_logger(__name__)

# Procedures callable without a session, matched by exact name
PUBLIC_PROCEDURES = frozenset(
    {
        "/auth.v1.AuthService/Register",
        "/auth.v1.AuthService/Login",
        "/health.v1.HealthService/Check",
    }
)

# Operational endpoints that are not RPC procedures
INFRASTRUCTURE_PATHS = frozenset(
    {
        "/metrics",
        "/docs",
        "/docs/oauth2-redirect",
        "/redoc",
        "/openapi.json",
    }
)

BEARER_PREFIX = "bearer "


def extract_credential(authorization: str | None) -> str:
    """Return the credential from an Authorization header.

    The ``Bearer`` prefix is optional; legacy clients send the bare value.
    """
    if not authorization:
        return ""
    value = authorization.strip()
    if value.lower() == BEARER_PREFIX.strip():
        return ""
    if value.lower().startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX) :]
    return value.strip()


class AuthInterceptor(BaseHTTPMiddleware):
    """Validates the caller's session and attaches an ``AuthContext``.

    Per call:
    1. Public procedures and infrastructure paths pass through untouched.
    2. A missing credential is ``unauthenticated``.
    3. The session store validates the credential, including legacy ids.
       A failure to validate is ``internal``; an invalid session is
       ``unauthenticated``.
    4. A session bound to a family gets that family's tenant engine. A
       resolution failure is ``internal``.
    5. The context is set for the handler, then cleared.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        procedure = request.url.path
        if procedure in PUBLIC_PROCEDURES or procedure in INFRASTRUCTURE_PATHS:
            return await call_next(request)

        credential = extract_credential(request.headers.get("authorization"))
        if not credential:
            return connect_error_response(Code.UNAUTHENTICATED, "Missing session token")

        registry: TenantRegistry = request.app.state.registry

        try:
            async with get_session(registry.master_engine) as session:
                result = await AuthService.for_session(session).validate_session_by_token(
                    credential
                )
        except Exception:
            logger.exception("Session validation failed", procedure=procedure)
            return connect_error_response(Code.INTERNAL, INTERNAL_ERROR_MESSAGE)

        if not result.valid or result.session is None:
            return connect_error_response(Code.UNAUTHENTICATED, "Invalid or expired session")

        user_session = result.session
        tenant_db = None
        if result.family_id:
            try:
                tenant_db = await registry.resolve(result.family_id)
            except Exception:
                logger.exception(
                    "Tenant database resolution failed",
                    procedure=procedure,
                    family_id=result.family_id,
                )
                return connect_error_response(Code.INTERNAL, INTERNAL_ERROR_MESSAGE)

        ctx = AuthContext(
            user_id=user_session.user_id,
            session_id=user_session.id,
            family_id=result.family_id,
            role=user_session.user_role,
            tenant_db=tenant_db,
        )
        set_auth_context(ctx)
        # Shared with outer middleware through the ASGI scope
        request.state.auth = ctx
        bind_user_context(
            ctx.user_id,
            family_id=ctx.family_id,
            session_id=ctx.session_id,
            email=result.user.email if result.user else None,
        )

        try:
            return await call_next(request)
        finally:
            clear_auth_context()
