from src.household.schemas.auth import (
    AuthErrorInfo,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionInfo,
    UserInfo,
)
from src.household.schemas.base import EmptyRequest, RpcModel, SuccessResponse

__all__ = [
    # Base
    "EmptyRequest",
    "RpcModel",
    "SuccessResponse",
    # Auth
    "AuthErrorInfo",
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "RegisterResponse",
    "SessionInfo",
    "UserInfo",
]
