"""Authentication service - registration, login and the session lifecycle.

Sessions live in the master database. Each one has an internal id and, for
sessions created since opaque tokens were introduced, a separate random token
that clients present as their credential. Only the token digest is stored; the
raw token leaves the service once, in the login result. Older clients still
present the numeric id of a session that has no token; those are accepted
through the legacy credential kind below.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.household.core.config import get_settings
from src.household.core.exceptions import AuthError, Code
from src.household.core.logging import get_logger
from src.household.core.security import (
    DUMMY_PASSWORD_HASH,
    generate_id,
    generate_session_token,
    hash_password,
    hash_token,
    is_valid_email,
    normalize_email,
    verify_password,
)
from src.household.models.base import utc_now
from src.household.models.master import User, UserSession
from src.household.repositories import MembershipRepository, SessionRepository, UserRepository

logger = get_logger(__name__)

INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
USER_EXISTS = "USER_EXISTS"
INVALID_SESSION = "INVALID_SESSION"
SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
USER_NOT_FOUND = "USER_NOT_FOUND"
WEAK_PASSWORD = "WEAK_PASSWORD"
INVALID_EMAIL = "INVALID_EMAIL"
INVALID_NAME = "INVALID_NAME"

_LEGACY_SESSION_ID = re.compile(r"\d+")


class CredentialKind(str, Enum):
    """How a presented credential identifies a session."""

    TOKEN = "token"
    LEGACY_ID = "legacy_id"


@dataclass(frozen=True)
class SessionCredential:
    kind: CredentialKind
    value: str


def parse_session_credentials(raw: str) -> tuple[SessionCredential, ...]:
    """Parse a presented credential into the lookups to try, in order.

    Every non-empty credential is first tried as an opaque token. A credential
    that is a plain integer is then also tried as a legacy session id.
    """
    raw = raw.strip()
    if not raw:
        return ()

    candidates = [SessionCredential(CredentialKind.TOKEN, raw)]
    if _LEGACY_SESSION_ID.fullmatch(raw):
        candidates.append(SessionCredential(CredentialKind.LEGACY_ID, str(int(raw))))
    return tuple(candidates)


@dataclass
class SessionValidationResult:
    valid: bool
    session: UserSession | None = None
    user: User | None = None
    family_id: str | None = None
    credential_kind: CredentialKind | None = None

    @classmethod
    def invalid(cls) -> "SessionValidationResult":
        return cls(valid=False)


@dataclass
class LoginResult:
    session: UserSession
    user: User
    token: str


class AuthService:
    """Authentication service backed by the master database.

    Validation problems (bad email, weak password, wrong credentials) raise
    ``AuthError``. An invalid or expired session is not an error: validation
    returns ``SessionValidationResult(valid=False)``.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        membership_repo: MembershipRepository,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.session_repo = session_repo
        self.membership_repo = membership_repo
        self.session = session
        self.settings = get_settings()

    @classmethod
    def for_session(cls, session: AsyncSession) -> "AuthService":
        """Build the service and its repositories on one master session."""
        return cls(
            UserRepository(session),
            SessionRepository(session),
            MembershipRepository(session),
            session,
        )

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(hours=self.settings.session_ttl_hours)

    async def register(self, email: str, name: str, password: str) -> User:
        """Create an account.

        Raises:
            AuthError: INVALID_NAME, INVALID_EMAIL, WEAK_PASSWORD or USER_EXISTS.
        """
        name = name.strip()
        if not name:
            raise AuthError(INVALID_NAME, "Name is required")

        email = normalize_email(email)
        if not is_valid_email(email):
            raise AuthError(INVALID_EMAIL, "Invalid email address")

        if len(password) < self.settings.min_password_length:
            raise AuthError(
                WEAK_PASSWORD,
                f"Password must be at least {self.settings.min_password_length} characters",
            )

        if await self.user_repo.exists_by_email(email):
            raise AuthError(USER_EXISTS, "User already exists", Code.ALREADY_EXISTS)

        now = utc_now()
        user = User(
            id=generate_id(),
            email=email,
            name=name,
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
        )
        self.user_repo.add(user)

        try:
            await self.session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            raise AuthError(USER_EXISTS, "User already exists", Code.ALREADY_EXISTS) from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("User registered", user_id=user.id)
        return user

    async def login(
        self,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> LoginResult:
        """Verify credentials and open a session.

        Unknown emails and wrong passwords raise the same INVALID_CREDENTIALS
        error, after the same amount of hashing work.
        """
        if not email or not password:
            raise self._invalid_credentials()

        user = await self.user_repo.get_by_email(normalize_email(email))

        # Always verify so unknown emails cost as much as known ones
        password_hash = user.password_hash if user else DUMMY_PASSWORD_HASH
        password_valid = verify_password(password, password_hash)

        if user is None or not password_valid:
            raise self._invalid_credentials()

        membership = await self.membership_repo.get_user_membership(user.id)

        token = generate_session_token()
        now = utc_now()
        user_session = UserSession(
            id=generate_id(),
            user_id=user.id,
            family_id=membership.family_id if membership else None,
            user_role=membership.role if membership else None,
            created_at=now,
            last_active=now,
            expires_at=now + self.session_ttl,
            user_agent=user_agent,
            ip_address=ip_address,
            session_token=hash_token(token),
        )
        self.session_repo.add(user_session)

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "User logged in",
            user_id=user.id,
            session_id=user_session.id,
            family_id=user_session.family_id,
        )
        return LoginResult(session=user_session, user=user, token=token)

    async def validate_session_by_token(self, token: str) -> SessionValidationResult:
        """Validate a presented credential, falling back to the legacy id form.

        An empty credential is invalid, not an error.
        """
        for credential in parse_session_credentials(token):
            result = await self.validate_credential(credential)
            if result.valid:
                return result
        return SessionValidationResult.invalid()

    async def validate_credential(self, credential: SessionCredential) -> SessionValidationResult:
        if credential.kind is CredentialKind.TOKEN:
            user_session = await self.session_repo.get_by_token_hash(hash_token(credential.value))
        else:
            user_session = await self.session_repo.get_legacy_by_id(credential.value)

        result = await self._validate(user_session)
        if result.valid:
            result.credential_kind = credential.kind
            if credential.kind is CredentialKind.LEGACY_ID:
                logger.info("Legacy session id accepted", session_id=credential.value)
        return result

    async def validate_session_by_id(self, session_id: str) -> SessionValidationResult:
        if not session_id:
            return SessionValidationResult.invalid()
        return await self._validate(await self.session_repo.get_by_id(session_id))

    async def _validate(self, user_session: UserSession | None) -> SessionValidationResult:
        """Shared expiry and activity handling for every lookup path."""
        if user_session is None:
            return SessionValidationResult.invalid()

        now = utc_now()
        if user_session.is_expired(now):
            await self._delete_expired(user_session)
            return SessionValidationResult.invalid()

        user = await self.user_repo.get_by_id(user_session.user_id)
        if user is None:
            return SessionValidationResult.invalid()

        await self._touch(user_session, now)
        return SessionValidationResult(
            valid=True,
            session=user_session,
            user=user,
            family_id=user_session.family_id,
        )

    async def _delete_expired(self, user_session: UserSession) -> None:
        try:
            await self.session_repo.delete_by_id(user_session.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Expired session removed", session_id=user_session.id)

    async def _touch(self, user_session: UserSession, now: datetime) -> None:
        """Best-effort last_active update. A failure is logged, not raised."""
        try:
            await self.session_repo.touch(user_session.id, now)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(
                "Failed to update session activity",
                session_id=user_session.id,
                error=str(e),
            )
            return
        user_session.last_active = now

    async def refresh_session(self, session_id: str) -> UserSession:
        """Extend a live session to a full TTL from now.

        Raises:
            AuthError: SESSION_NOT_FOUND, or INVALID_SESSION if it already expired.
        """
        user_session = await self.session_repo.get_by_id(session_id)
        if user_session is None:
            raise AuthError(SESSION_NOT_FOUND, "Session not found", Code.NOT_FOUND)

        now = utc_now()
        if user_session.is_expired(now):
            raise AuthError(INVALID_SESSION, "Session has expired", Code.UNAUTHENTICATED)

        expires_at = now + self.session_ttl
        try:
            await self.session_repo.extend(session_id, expires_at, now)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        user_session.expires_at = expires_at
        user_session.last_active = now
        logger.debug("Session refreshed", session_id=session_id)
        return user_session

    async def logout(self, session_id: str) -> None:
        """Delete a session. Deleting an unknown session is not an error."""
        try:
            await self.session_repo.delete_by_id(session_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Session logged out", session_id=session_id)

    async def logout_all(self, user_id: str) -> int:
        try:
            count = await self.session_repo.delete_for_user(user_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("All sessions logged out", user_id=user_id, count=count)
        return count

    async def update_user_family_sessions(
        self, user_id: str, family_id: str | None, role: str | None
    ) -> int:
        """Push a membership change into every non-expired session of a user.

        Already-expired sessions are left untouched.

        Returns:
            Number of sessions updated.
        """
        try:
            count = await self.session_repo.update_family_for_user(
                user_id, family_id, role, utc_now()
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info(
            "Updated family on user sessions",
            user_id=user_id,
            family_id=family_id,
            role=role,
            count=count,
        )
        return count

    async def cleanup_expired_sessions(self) -> int:
        """Delete every session past its expiry. Returns the number removed."""
        try:
            count = await self.session_repo.delete_expired(utc_now())
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return count

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise AuthError(USER_NOT_FOUND, "User not found", Code.NOT_FOUND)
        return user

    async def get_user_sessions(self, user_id: str) -> list[UserSession]:
        """Active (non-expired) sessions of a user, newest first."""
        return await self.session_repo.list_active_for_user(user_id, utc_now())

    @staticmethod
    def _invalid_credentials() -> AuthError:
        return AuthError(INVALID_CREDENTIALS, "Invalid email or password", Code.UNAUTHENTICATED)
