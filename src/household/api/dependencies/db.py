"""Database session dependencies for the master and tenant databases."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.household.api.context import FamilyAuth
from src.household.core.db import TenantRegistry, get_session


def get_registry(request: Request) -> TenantRegistry:
    """The tenant registry created by the application lifespan."""
    return request.app.state.registry


Registry = Annotated[TenantRegistry, Depends(get_registry)]


async def get_db_session(registry: Registry) -> AsyncGenerator[AsyncSession]:
    """Get a session on the master database."""
    async with get_session(registry.master_engine) as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_tenant_db_session(auth: FamilyAuth) -> AsyncGenerator[AsyncSession]:
    """Get a session on the caller's family database.

    Requires a session bound to a family; the engine was resolved by the auth
    interceptor.
    """
    assert auth.tenant_db is not None
    async with get_session(auth.tenant_db) as session:
        yield session


TenantDBSession = Annotated[AsyncSession, Depends(get_tenant_db_session)]
