"""Tests for the session store: registration, login, validation and session lifecycle."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from src.household.core.db import TenantRegistry, get_session
from src.household.core.exceptions import AuthError, Code
from src.household.core.security import hash_token, verify_password
from src.household.models.base import utc_now
from src.household.models.master import Family, User
from src.household.services import AuthService
from src.household.services.auth_service import CredentialKind
from tests.factories import DEFAULT_TEST_PASSWORD, UserSessionFactory
from tests.helpers import create_session, create_user_with_session, get_user_session

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


@asynccontextmanager
async def auth_service(engine: AsyncEngine) -> AsyncGenerator[AuthService]:
    async with get_session(engine) as session:
        yield AuthService.for_session(session)


class TestRegister:
    async def test_register_normalizes_email_and_hashes_password(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        async with auth_service(master_engine) as service:
            user = await service.register("  Dana@Example.COM ", " Dana ", "correct-horse")

        assert user.email == "dana@example.com"
        assert user.name == "Dana"
        assert user.password_hash != "correct-horse"
        assert verify_password("correct-horse", user.password_hash)

    async def test_duplicate_email_is_rejected_case_insensitively(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as exc_info:
                await service.register("ALICE@example.com", "Alice Again", "correct-horse")

        assert exc_info.value.code == "USER_EXISTS"
        assert exc_info.value.status == Code.ALREADY_EXISTS

    @pytest.mark.parametrize(
        ("email", "name", "password", "code"),
        [
            ("dana@example.com", "   ", "correct-horse", "INVALID_NAME"),
            ("not-an-email", "Dana", "correct-horse", "INVALID_EMAIL"),
            ("dana@example.com", "Dana", "short", "WEAK_PASSWORD"),
        ],
    )
    async def test_invalid_registration(
        self,
        master_engine: AsyncEngine,
        registry: TenantRegistry,
        email: str,
        name: str,
        password: str,
        code: str,
    ) -> None:
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as exc_info:
                await service.register(email, name, password)

        assert exc_info.value.code == code


class TestLogin:
    async def test_login_opens_session_with_token(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        async with auth_service(master_engine) as service:
            result = await service.login(
                "alice@example.com",
                DEFAULT_TEST_PASSWORD,
                user_agent="pytest",
                ip_address="203.0.113.7",
            )

        session = result.session
        assert result.user.id == manager.id
        assert result.token
        assert session.session_token == hash_token(result.token)
        assert session.session_token != result.token
        assert session.family_id is None
        assert session.expires_at - session.created_at == timedelta(hours=24)
        assert session.user_agent == "pytest"
        assert session.ip_address == "203.0.113.7"

    async def test_login_carries_membership(
        self, master_engine: AsyncEngine, manager: User, family: Family
    ) -> None:
        async with auth_service(master_engine) as service:
            result = await service.login("alice@example.com", DEFAULT_TEST_PASSWORD)

        assert result.session.family_id == family.id
        assert result.session.user_role == "manager"

    async def test_unknown_email_and_wrong_password_are_indistinguishable(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as unknown:
                await service.login("nobody@example.com", DEFAULT_TEST_PASSWORD)
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as wrong:
                await service.login("alice@example.com", "wrong-password")

        assert unknown.value.code == wrong.value.code == "INVALID_CREDENTIALS"
        assert unknown.value.message == wrong.value.message

    async def test_empty_credentials(self, master_engine: AsyncEngine, manager: User) -> None:
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as exc_info:
                await service.login("", "")

        assert exc_info.value.code == "INVALID_CREDENTIALS"


class TestValidate:
    async def test_valid_token(self, master_engine: AsyncEngine, registry: TenantRegistry) -> None:
        user, session = await create_user_with_session(master_engine)
        assert session.session_token is not None

        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_token(session.session_token)

        assert result.valid
        assert result.user is not None
        assert result.user.id == user.id
        assert result.credential_kind is CredentialKind.TOKEN

    async def test_validation_touches_last_active(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        stale = utc_now() - timedelta(hours=3)
        _, session = await create_user_with_session(master_engine, last_active=stale)
        assert session.session_token is not None

        async with auth_service(master_engine) as service:
            await service.validate_session_by_token(session.session_token)

        stored = await get_user_session(master_engine, session.id)
        assert stored is not None
        assert stored.last_active > stale

    async def test_login_token_validates_but_stored_digest_does_not(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        async with auth_service(master_engine) as service:
            login = await service.login("alice@example.com", DEFAULT_TEST_PASSWORD)
        stored = await get_user_session(master_engine, login.session.id)
        assert stored is not None
        assert stored.session_token == hash_token(login.token)

        async with auth_service(master_engine) as service:
            accepted = await service.validate_session_by_token(login.token)
        async with auth_service(master_engine) as service:
            rejected = await service.validate_session_by_token(stored.session_token)

        assert accepted.valid
        assert not rejected.valid

    async def test_unknown_token(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_token("not-a-real-token")

        assert not result.valid
        assert result.session is None

    async def test_empty_token(self, master_engine: AsyncEngine, registry: TenantRegistry) -> None:
        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_token("   ")

        assert not result.valid

    async def test_expired_session_is_deleted(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        session = await create_session(
            master_engine, UserSessionFactory.expired(user_id=manager.id)
        )
        assert session.session_token is not None

        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_token(session.session_token)

        assert not result.valid
        assert await get_user_session(master_engine, session.id) is None

    async def test_legacy_numeric_id(self, master_engine: AsyncEngine, manager: User) -> None:
        await create_session(master_engine, UserSessionFactory.legacy("42", user_id=manager.id))

        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_token("42")

        assert result.valid
        assert result.session is not None
        assert result.session.id == "42"
        assert result.credential_kind is CredentialKind.LEGACY_ID

    async def test_numeric_id_of_token_session_is_not_accepted(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        await create_session(master_engine, UserSessionFactory.build(id="43", user_id=manager.id))

        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_token("43")

        assert not result.valid

    async def test_validate_by_id(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        _, session = await create_user_with_session(master_engine)

        async with auth_service(master_engine) as service:
            result = await service.validate_session_by_id(session.id)

        assert result.valid
        assert result.session is not None
        assert result.session.id == session.id


class TestRefresh:
    async def test_refresh_extends_expiry(self, master_engine: AsyncEngine, manager: User) -> None:
        session = await create_session(
            master_engine,
            UserSessionFactory.build(user_id=manager.id, expires_at=utc_now() + timedelta(hours=1)),
        )

        async with auth_service(master_engine) as service:
            refreshed = await service.refresh_session(session.id)

        assert refreshed.expires_at > session.expires_at
        stored = await get_user_session(master_engine, session.id)
        assert stored is not None
        assert stored.expires_at == refreshed.expires_at

    async def test_refresh_of_expired_session_fails_and_leaves_it(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        session = await create_session(
            master_engine, UserSessionFactory.expired(user_id=manager.id)
        )

        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as exc_info:
                await service.refresh_session(session.id)

        assert exc_info.value.code == "INVALID_SESSION"
        stored = await get_user_session(master_engine, session.id)
        assert stored is not None
        assert stored.expires_at == session.expires_at

    async def test_refresh_unknown_session(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as exc_info:
                await service.refresh_session("missing")

        assert exc_info.value.code == "SESSION_NOT_FOUND"
        assert exc_info.value.status == Code.NOT_FOUND


class TestLogout:
    async def test_logout_is_idempotent(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        _, session = await create_user_with_session(master_engine)

        async with auth_service(master_engine) as service:
            await service.logout(session.id)
        async with auth_service(master_engine) as service:
            await service.logout(session.id)

        assert await get_user_session(master_engine, session.id) is None

    async def test_logout_all(self, master_engine: AsyncEngine, manager: User) -> None:
        for _ in range(3):
            await create_session(master_engine, UserSessionFactory.build(user_id=manager.id))

        async with auth_service(master_engine) as service:
            count = await service.logout_all(manager.id)
        async with auth_service(master_engine) as service:
            remaining = await service.get_user_sessions(manager.id)

        assert count == 3
        assert remaining == []


class TestSessionMaintenance:
    async def test_family_update_skips_expired_sessions(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        live = await create_session(master_engine, UserSessionFactory.build(user_id=manager.id))
        expired = await create_session(
            master_engine, UserSessionFactory.expired(user_id=manager.id)
        )

        async with auth_service(master_engine) as service:
            count = await service.update_user_family_sessions(manager.id, "fam-1", "member")

        assert count == 1
        live_row = await get_user_session(master_engine, live.id)
        expired_row = await get_user_session(master_engine, expired.id)
        assert live_row is not None
        assert (live_row.family_id, live_row.user_role) == ("fam-1", "member")
        assert expired_row is not None
        assert expired_row.family_id is None

    async def test_cleanup_removes_only_expired(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        live = await create_session(master_engine, UserSessionFactory.build(user_id=manager.id))
        for _ in range(2):
            await create_session(master_engine, UserSessionFactory.expired(user_id=manager.id))

        async with auth_service(master_engine) as service:
            removed = await service.cleanup_expired_sessions()

        assert removed == 2
        assert await get_user_session(master_engine, live.id) is not None

    async def test_user_sessions_are_newest_first(
        self, master_engine: AsyncEngine, manager: User
    ) -> None:
        older = await create_session(
            master_engine,
            UserSessionFactory.build(user_id=manager.id, created_at=utc_now() - timedelta(hours=2)),
        )
        newer = await create_session(master_engine, UserSessionFactory.build(user_id=manager.id))
        await create_session(master_engine, UserSessionFactory.expired(user_id=manager.id))

        async with auth_service(master_engine) as service:
            sessions = await service.get_user_sessions(manager.id)

        assert [s.id for s in sessions] == [newer.id, older.id]

    async def test_get_unknown_user(
        self, master_engine: AsyncEngine, registry: TenantRegistry
    ) -> None:
        async with auth_service(master_engine) as service:
            with pytest.raises(AuthError) as exc_info:
                await service.get_user("missing")

        assert exc_info.value.code == "USER_NOT_FOUND"
