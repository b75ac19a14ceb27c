"""RPC interceptors - authentication and call logging."""

from src.household.api.interceptors.auth import (
    INFRASTRUCTURE_PATHS,
    PUBLIC_PROCEDURES,
    AuthInterceptor,
    extract_credential,
)
from src.household.api.interceptors.logging import RpcLoggingInterceptor

__all__ = [
    "INFRASTRUCTURE_PATHS",
    "PUBLIC_PROCEDURES",
    "AuthInterceptor",
    "RpcLoggingInterceptor",
    "extract_credential",
]
