import asyncio
import contextlib
import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.engine import make_url

from src.household.api.middlewares import setup_middlewares
from src.household.api.v1.router import rpc_router
from src.household.core.config import Settings, get_settings
from src.household.core.db import TenantRegistry, create_database_engine, create_provisioner
from src.household.core.exceptions import setup_exception_handlers
from src.household.core.logging import get_logger, setup_logging
from src.household.core.rate_limit import limiter
from src.household.core.shutdown import request_tracker
from src.household.services.session_cleanup import start_session_cleanup

logger = get_logger(__name__)


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)  # type: ignore[arg-type]


def build_registry(settings: Settings) -> TenantRegistry:
    _ensure_sqlite_directory(settings.master_database_url)
    return TenantRegistry(
        create_database_engine(settings.master_database_url),
        create_provisioner(settings),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", env=settings.app_env)

    registry = build_registry(settings)
    app.state.registry = registry

    if settings.run_migrations_on_startup:
        report = await registry.run_migrations()
        if not report.ok:
            logger.warning("Some tenant databases failed to migrate", failures=report.failures)

    cleanup_task = start_session_cleanup(
        registry.master_engine, settings.session_cleanup_interval_seconds
    )

    yield

    # Graceful shutdown with proper request draining
    grace_period = settings.shutdown_grace_period
    logger.info(
        "Shutdown initiated",
        in_flight_requests=request_tracker.in_flight_count,
    )

    # Start shutdown mode to prevent new requests from being tracked
    await request_tracker.start_shutdown()

    drained = await request_tracker.wait_for_drain(timeout=grace_period)
    if not drained:
        logger.warning(
            f"Shutdown timeout after {grace_period}s",
            in_flight_requests=request_tracker.in_flight_count,
        )

    if cleanup_task is not None:
        cleanup_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup_task

    logger.info("Closing connections...")
    await registry.close()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Household expense tracking RPC API with a database per family",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)
    app.state.limiter = limiter

    setup_middlewares(app, settings)

    app.include_router(rpc_router)

    # Prometheus metrics instrumentation
    instrumentator = Instrumentator().instrument(app)

    # Protect /metrics endpoint if API key is configured
    if settings.metrics_api_key:
        api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

        async def verify_metrics_key(api_key: str | None = Depends(api_key_header)) -> None:
            if (
                api_key is None
                or settings.metrics_api_key is None
                or not secrets.compare_digest(api_key, settings.metrics_api_key)
            ):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid or missing metrics API key",
                )

        instrumentator.expose(app, endpoint="/metrics", dependencies=[Depends(verify_metrics_key)])
    else:
        instrumentator.expose(app, endpoint="/metrics")

    return app


app = create_app()
