"""In-flight request tracking for graceful shutdown."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from src.household.core.logging import get_logger

logger = get_logger(__name__)


class RequestTracker:
    """Counts in-flight RPC calls so shutdown can wait for them to finish."""

    def __init__(self) -> None:
        self._in_flight = 0
        self._shutting_down = False
        self._lock = asyncio.Lock()
        self._drain_event = asyncio.Event()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    @property
    def in_flight_count(self) -> int:
        return self._in_flight

    @asynccontextmanager
    async def track_request(self) -> AsyncGenerator[None]:
        async with self._lock:
            self._in_flight += 1
        try:
            yield
        finally:
            async with self._lock:
                self._in_flight -= 1
                if self._in_flight == 0 and self._shutting_down:
                    self._drain_event.set()

    async def start_shutdown(self) -> None:
        """Stop accepting new work and arm the drain event."""
        self._shutting_down = True
        async with self._lock:
            logger.info("Shutdown started", in_flight=self._in_flight)
            if self._in_flight == 0:
                self._drain_event.set()

    async def wait_for_drain(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for in-flight calls to finish.

        Returns:
            True if every call finished in time.
        """
        try:
            await asyncio.wait_for(self._drain_event.wait(), timeout=timeout)
        except TimeoutError:
            logger.warning("Shutdown drain timed out", timeout=timeout, in_flight=self._in_flight)
            return False
        logger.info("In-flight requests drained")
        return True

    def reset(self) -> None:
        """Reset tracker state. For testing only."""
        self._in_flight = 0
        self._shutting_down = False
        self._drain_event = asyncio.Event()


request_tracker = RequestTracker()
