"""Test helper functions for common data creation patterns.

Every helper opens and closes its own session. SQLite allows one writer at a
time, so tests never keep a session open across a call into the app or a
service that writes through another connection.
"""

from typing import Any

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from src.household.core.db import TenantRegistry, get_session
from src.household.core.security import hash_token
from src.household.models.family import FamilyMember
from src.household.models.master import Family, User, UserSession
from src.household.services import FamilyService
from tests.factories import DEFAULT_TEST_PASSWORD, UserFactory, UserSessionFactory

REGISTER = "/auth.v1.AuthService/Register"
LOGIN = "/auth.v1.AuthService/Login"


async def create_user(engine: AsyncEngine, **user_kwargs: Any) -> User:
    """Insert a user built by UserFactory.

    Args:
        engine: Master database engine
        **user_kwargs: Additional args passed to UserFactory

    Returns:
        The committed user
    """
    user = UserFactory.build(**user_kwargs)
    async with get_session(engine) as session:
        session.add(user)
        await session.commit()
    return user


async def create_session(engine: AsyncEngine, session: UserSession) -> UserSession:
    """Insert a session built by UserSessionFactory.

    The row stores the token digest, as login does. The returned object keeps
    the raw token so tests can present it as a credential.
    """
    token = session.session_token
    stored = UserSession(
        **session.model_dump(exclude={"session_token"}),
        session_token=hash_token(token) if token is not None else None,
    )
    async with get_session(engine) as db:
        db.add(stored)
        await db.commit()
    return session


async def create_user_with_session(
    engine: AsyncEngine, **session_kwargs: Any
) -> tuple[User, UserSession]:
    """Create a user and a live session for them."""
    user = await create_user(engine)
    user_session = await create_session(
        engine, UserSessionFactory.build(user_id=user.id, **session_kwargs)
    )
    return user, user_session


async def create_family(registry: TenantRegistry, manager: User, name: str = "Smiths") -> Family:
    """Create a family managed by ``manager`` through the family service."""
    async with get_session(registry.master_engine) as session:
        return await FamilyService.for_session(session, registry).create_family(manager.id, name)


async def join_family(registry: TenantRegistry, user: User, invite_code: str) -> Family:
    async with get_session(registry.master_engine) as session:
        return await FamilyService.for_session(session, registry).join_family(
            user.id, invite_code
        )


async def get_user_session(engine: AsyncEngine, session_id: str) -> UserSession | None:
    async with get_session(engine) as session:
        return await session.get(UserSession, session_id)


async def get_tenant_member(engine: AsyncEngine, user_id: str) -> FamilyMember | None:
    async with get_session(engine) as session:
        return await session.get(FamilyMember, user_id)


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_and_login(
    client: AsyncClient,
    email: str,
    name: str = "Test User",
    password: str = DEFAULT_TEST_PASSWORD,
) -> dict[str, Any]:
    """Register through the API and log in. Returns the Login response body."""
    response = await client.post(
        REGISTER, json={"email": email, "name": name, "password": password}
    )
    assert response.status_code == 200, response.text
    assert "error" not in response.json(), response.json()

    response = await client.post(LOGIN, json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    assert "error" not in body, body
    return body
