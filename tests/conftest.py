"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os
import tempfile

# Set the environment before any app imports. Rate limiting is disabled when
# APP_ENV is testing; databases live in a throwaway directory.
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="household-tests-")
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("MASTER_DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DATA_DIR}/master.db")
os.environ.setdefault("DATABASE_PROVISIONER", "local")
os.environ.setdefault("LOCAL_TENANT_DIRECTORY", f"{_TEST_DATA_DIR}/families")
# Cheap hashing keeps the suite fast
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("SESSION_CLEANUP_INTERVAL_SECONDS", "0")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import Generator

import pytest

from src.household.api.context import clear_auth_context
from src.household.core.config import get_settings
from src.household.core.logging import clear_request_context
from src.household.core.shutdown import request_tracker

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_request_state() -> Generator[None]:
    """Reset per-request globals so state never leaks between tests."""
    request_tracker.reset()
    clear_auth_context()
    clear_request_context()
    yield
    request_tracker.reset()
    clear_auth_context()
    clear_request_context()
