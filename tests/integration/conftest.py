"""Integration test fixtures for database and HTTP client operations.

Every test gets its own master database and tenant directory under
``tmp_path``, so tests are isolated and need no external services.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from src.household.core.db import (
    LocalDatabaseProvisioner,
    TenantRegistry,
    create_database_engine,
)
from src.household.main import create_app
from src.household.models.master import Family, User
from tests.helpers import create_family, create_user


@pytest.fixture
async def master_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Engine on an empty master database file."""
    engine = create_database_engine(f"sqlite+aiosqlite:///{tmp_path / 'master.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
def provisioner(tmp_path: Path) -> LocalDatabaseProvisioner:
    return LocalDatabaseProvisioner(tmp_path / "families")


@pytest.fixture
async def registry(
    master_engine: AsyncEngine, provisioner: LocalDatabaseProvisioner
) -> AsyncGenerator[TenantRegistry]:
    """Registry over a migrated master database."""
    registry = TenantRegistry(master_engine, provisioner)
    await registry.migrate_master()
    yield registry
    await registry.close()


@pytest.fixture
async def manager(master_engine: AsyncEngine, registry: TenantRegistry) -> User:
    return await create_user(master_engine, name="Alice", email="alice@example.com")


@pytest.fixture
async def family(registry: TenantRegistry, manager: User) -> Family:
    """The Smiths, managed by Alice, with a provisioned database."""
    return await create_family(registry, manager, "Smiths")


@pytest.fixture
async def member(master_engine: AsyncEngine, registry: TenantRegistry) -> User:
    """A registered user who has not joined a family yet."""
    return await create_user(master_engine, name="Bob", email="bob@example.com")


@pytest.fixture
async def client(registry: TenantRegistry) -> AsyncGenerator[AsyncClient]:
    """HTTP client against a fresh app wired to the test registry.

    The lifespan does not run; the registry is attached directly.
    """
    app = create_app()
    app.state.registry = registry
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client
