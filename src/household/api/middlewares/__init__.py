"""Application middlewares and RPC interceptors."""

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.household.api.interceptors import AuthInterceptor, RpcLoggingInterceptor
from src.household.core.config import Settings

from .logging_context import logging_context_middleware
from .request_tracking import request_tracking_middleware

__all__ = [
    "setup_middlewares",
    "logging_context_middleware",
    "request_tracking_middleware",
]


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Configure all application middlewares.

    The last middleware added is the outermost, so they are added innermost
    first. Resulting order, outermost first: correlation id, CORS, logging
    context, request tracking, RPC logging, auth.
    """
    # Auth interceptor - innermost, runs right before the procedure
    app.add_middleware(AuthInterceptor)

    # RPC logging - records every call, including rejected ones
    app.add_middleware(RpcLoggingInterceptor)

    # Request tracking - for graceful shutdown
    @app.middleware("http")
    async def _request_tracking(request, call_next):  # type: ignore[no-untyped-def]
        return await request_tracking_middleware(request, call_next)

    # Logging context - binds request_id to structlog context
    @app.middleware("http")
    async def _logging_context(request, call_next):  # type: ignore[no-untyped-def]
        return await logging_context_middleware(request, call_next)

    # CORS - handle cross-origin requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["POST"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Connect-Protocol-Version",
            "X-Request-ID",
        ],
        expose_headers=["X-Request-ID"],
    )

    # Correlation ID - generates/propagates X-Request-ID (outermost)
    app.add_middleware(CorrelationIdMiddleware)
