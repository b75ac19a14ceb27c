"""Periodic removal of expired login sessions."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

from src.household.core.db import get_session
from src.household.core.logging import get_logger
from src.household.services.auth_service import AuthService

logger = get_logger(__name__)


async def cleanup_once(master_engine: AsyncEngine) -> int:
    async with get_session(master_engine) as session:
        return await AuthService.for_session(session).cleanup_expired_sessions()


async def run_session_cleanup(master_engine: AsyncEngine, interval_seconds: float) -> None:
    """Delete expired sessions every ``interval_seconds`` until cancelled.

    A failed pass is logged and retried on the next tick.
    """
    logger.info("Session cleanup started", interval_seconds=interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            count = await cleanup_once(master_engine)
        except Exception:
            logger.exception("Session cleanup failed")
            continue
        if count:
            logger.info("Expired sessions removed", count=count)


def start_session_cleanup(
    master_engine: AsyncEngine, interval_seconds: float
) -> asyncio.Task[None] | None:
    """Start the cleanup loop, or return None when the interval is 0."""
    if interval_seconds <= 0:
        return None
    return asyncio.create_task(
        run_session_cleanup(master_engine, interval_seconds), name="session-cleanup"
    )
