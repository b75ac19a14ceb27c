from datetime import datetime

from pydantic import Field

from src.household.schemas.base import RpcModel


class UserInfo(RpcModel):
    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime


class SessionInfo(RpcModel):
    id: str
    user_id: str
    family_id: str | None = None
    user_role: str | None = None
    created_at: datetime
    last_active: datetime
    expires_at: datetime
    user_agent: str | None = None
    ip_address: str | None = None


class LoginSessionInfo(SessionInfo):
    """A new session together with its token. Only Login ever returns the token."""

    session_token: str


class AuthErrorInfo(RpcModel):
    """Application error embedded in an auth response."""

    code: str
    message: str


class RegisterRequest(RpcModel):
    email: str = Field(max_length=255)
    name: str = Field(max_length=100)
    password: str = Field(max_length=128)


class RegisterResponse(RpcModel):
    user: UserInfo | None = None
    error: AuthErrorInfo | None = None


class LoginRequest(RpcModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=128)


class LoginResponse(RpcModel):
    session: LoginSessionInfo | None = None
    user: UserInfo | None = None
    error: AuthErrorInfo | None = None


class SessionRequest(RpcModel):
    """Targets a session by id. Defaults to the caller's own session."""

    session_id: str | None = None


class LogoutResponse(RpcModel):
    success: bool = False
    error: AuthErrorInfo | None = None


class LogoutAllResponse(RpcModel):
    count: int = 0
    error: AuthErrorInfo | None = None


class ListSessionsResponse(RpcModel):
    sessions: list[SessionInfo] = Field(default_factory=list)
    error: AuthErrorInfo | None = None


class RefreshSessionResponse(RpcModel):
    session: SessionInfo | None = None
    error: AuthErrorInfo | None = None


class SessionValidationInfo(RpcModel):
    valid: bool
    session: SessionInfo | None = None
    user: UserInfo | None = None
    family_id: str | None = None


class ValidateSessionResponse(RpcModel):
    result: SessionValidationInfo | None = None
    error: AuthErrorInfo | None = None


class GetCurrentUserResponse(RpcModel):
    user: UserInfo | None = None
    family_id: str | None = None
    role: str | None = None
    error: AuthErrorInfo | None = None
