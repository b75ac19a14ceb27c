"""health.v1.HealthService procedures. Public: no session required."""

from fastapi import APIRouter

from src.household.api.dependencies import Registry
from src.household.core.db.registry import MASTER_TARGET
from src.household.core.shutdown import request_tracker
from src.household.schemas.base import EmptyRequest
from src.household.schemas.health import CheckResponse, ServingStatus

router = APIRouter(prefix="/health.v1.HealthService", tags=["health"])


@router.post("/Check", response_model=CheckResponse)
async def check(registry: Registry, body: EmptyRequest | None = None) -> CheckResponse:
    """Ping the master database and every open family database.

    Reports NOT_SERVING while shutting down or when the master database is
    unreachable. A failing family database is reported but does not take the
    service out of rotation.
    """
    results = await registry.health_check()
    serving = not request_tracker.is_shutting_down and results.get(MASTER_TARGET) is None
    return CheckResponse(
        status=ServingStatus.SERVING if serving else ServingStatus.NOT_SERVING,
        databases={name: "ok" if error is None else "error" for name, error in results.items()},
    )
