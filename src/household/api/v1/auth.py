"""auth.v1.AuthService procedures.

Application errors (bad input, wrong credentials, unknown session) are returned
in the response's ``error`` field with a successful transport status. Clients
check both the transport status and ``error``.
"""

from fastapi import APIRouter
from starlette.requests import Request

from src.household.api.context import CurrentAuth
from src.household.api.dependencies import AuthServiceDep
from src.household.core.config import get_settings
from src.household.core.exceptions import AuthError
from src.household.core.rate_limit import limiter
from src.household.core.request_info import get_client_ip
from src.household.schemas.auth import (
    AuthErrorInfo,
    GetCurrentUserResponse,
    ListSessionsResponse,
    LoginRequest,
    LoginResponse,
    LoginSessionInfo,
    LogoutAllResponse,
    LogoutResponse,
    RefreshSessionResponse,
    RegisterRequest,
    RegisterResponse,
    SessionInfo,
    SessionRequest,
    SessionValidationInfo,
    UserInfo,
    ValidateSessionResponse,
)
from src.household.schemas.base import EmptyRequest
from src.household.services.auth_service import SESSION_NOT_FOUND

router = APIRouter(prefix="/auth.v1.AuthService", tags=["auth"])

settings = get_settings()


def _error(exc: AuthError) -> AuthErrorInfo:
    return AuthErrorInfo(code=exc.code, message=exc.message)


def _own_session_id(body: SessionRequest | None, auth: CurrentAuth) -> str:
    """Resolve the target session. Callers may only act on their own session."""
    session_id = body.session_id if body and body.session_id else auth.session_id
    if session_id != auth.session_id:
        raise AuthError(SESSION_NOT_FOUND, "Session not found")
    return session_id


@router.post("/Register", response_model=RegisterResponse, response_model_exclude_none=True)
@limiter.limit(settings.register_rate_limit)
async def register(
    request: Request, body: RegisterRequest, service: AuthServiceDep
) -> RegisterResponse:
    try:
        user = await service.register(body.email, body.name, body.password)
    except AuthError as e:
        return RegisterResponse(error=_error(e))
    return RegisterResponse(user=UserInfo.model_validate(user))


@router.post("/Login", response_model=LoginResponse, response_model_exclude_none=True)
@limiter.limit(settings.login_rate_limit)
async def login(request: Request, body: LoginRequest, service: AuthServiceDep) -> LoginResponse:
    ip_address = get_client_ip(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
    )
    try:
        result = await service.login(
            body.email,
            body.password,
            user_agent=request.headers.get("user-agent"),
            ip_address=ip_address,
        )
    except AuthError as e:
        return LoginResponse(error=_error(e))
    session = SessionInfo.model_validate(result.session)
    return LoginResponse(
        session=LoginSessionInfo(**session.model_dump(), session_token=result.token),
        user=UserInfo.model_validate(result.user),
    )


@router.post("/Logout", response_model=LogoutResponse, response_model_exclude_none=True)
async def logout(
    auth: CurrentAuth, service: AuthServiceDep, body: SessionRequest | None = None
) -> LogoutResponse:
    try:
        await service.logout(_own_session_id(body, auth))
    except AuthError as e:
        return LogoutResponse(success=False, error=_error(e))
    return LogoutResponse(success=True)


@router.post("/LogoutAll", response_model=LogoutAllResponse, response_model_exclude_none=True)
async def logout_all(
    auth: CurrentAuth, service: AuthServiceDep, body: EmptyRequest | None = None
) -> LogoutAllResponse:
    """End every session of the caller, the current one included."""
    return LogoutAllResponse(count=await service.logout_all(auth.user_id))


@router.post(
    "/ListSessions", response_model=ListSessionsResponse, response_model_exclude_none=True
)
async def list_sessions(
    auth: CurrentAuth, service: AuthServiceDep, body: EmptyRequest | None = None
) -> ListSessionsResponse:
    sessions = await service.get_user_sessions(auth.user_id)
    return ListSessionsResponse(
        sessions=[SessionInfo.model_validate(session) for session in sessions]
    )


@router.post(
    "/RefreshSession", response_model=RefreshSessionResponse, response_model_exclude_none=True
)
async def refresh_session(
    auth: CurrentAuth, service: AuthServiceDep, body: SessionRequest | None = None
) -> RefreshSessionResponse:
    try:
        session = await service.refresh_session(_own_session_id(body, auth))
    except AuthError as e:
        return RefreshSessionResponse(error=_error(e))
    return RefreshSessionResponse(session=SessionInfo.model_validate(session))


@router.post(
    "/ValidateSession", response_model=ValidateSessionResponse, response_model_exclude_none=True
)
async def validate_session(
    auth: CurrentAuth, service: AuthServiceDep, body: SessionRequest | None = None
) -> ValidateSessionResponse:
    try:
        result = await service.validate_session_by_id(_own_session_id(body, auth))
    except AuthError as e:
        return ValidateSessionResponse(error=_error(e))
    return ValidateSessionResponse(
        result=SessionValidationInfo(
            valid=result.valid,
            session=SessionInfo.model_validate(result.session) if result.session else None,
            user=UserInfo.model_validate(result.user) if result.user else None,
            family_id=result.family_id,
        )
    )


@router.post(
    "/GetCurrentUser", response_model=GetCurrentUserResponse, response_model_exclude_none=True
)
async def get_current_user(
    auth: CurrentAuth, service: AuthServiceDep, body: EmptyRequest | None = None
) -> GetCurrentUserResponse:
    try:
        user = await service.get_user(auth.user_id)
    except AuthError as e:
        return GetCurrentUserResponse(error=_error(e))
    return GetCurrentUserResponse(
        user=UserInfo.model_validate(user),
        family_id=auth.family_id,
        role=auth.role,
    )
