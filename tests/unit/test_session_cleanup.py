"""Tests for the periodic expired-session cleanup loop."""

import asyncio
import contextlib
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.household.services import session_cleanup
from src.household.services.session_cleanup import start_session_cleanup

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_disabled_when_interval_is_zero():
    assert start_session_cleanup(MagicMock(), 0) is None


async def test_loop_survives_a_failed_pass(monkeypatch: pytest.MonkeyPatch):
    calls = AsyncMock(side_effect=[RuntimeError("database is locked"), 3, 0, 0, 0, 0, 0, 0])
    monkeypatch.setattr(session_cleanup, "cleanup_once", calls)

    task = start_session_cleanup(MagicMock(), 0.01)
    assert task is not None
    assert task.get_name() == "session-cleanup"

    for _ in range(100):
        if calls.await_count >= 2:
            break
        await asyncio.sleep(0.01)

    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task

    assert calls.await_count >= 2
