"""Repository for UserSession entity."""

from datetime import datetime

from sqlalchemy import delete, update
from sqlmodel import col, select

from src.household.models.master import UserSession
from src.household.repositories.base import BaseRepository


class SessionRepository(BaseRepository[UserSession]):
    """Repository for login sessions in the master database.

    Bulk statements return the number of affected rows.
    """

    model = UserSession

    async def get_by_token_hash(self, token_hash: str) -> UserSession | None:
        result = await self.session.execute(
            select(UserSession).where(UserSession.session_token == token_hash)
        )
        return result.scalar_one_or_none()

    async def get_legacy_by_id(self, session_id: str) -> UserSession | None:
        """Get a session created before tokens existed: numeric id, no token."""
        result = await self.session.execute(
            select(UserSession).where(
                UserSession.id == session_id,
                col(UserSession.session_token).is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def list_active_for_user(self, user_id: str, now: datetime) -> list[UserSession]:
        result = await self.session.execute(
            select(UserSession)
            .where(UserSession.user_id == user_id, col(UserSession.expires_at) > now)
            .order_by(col(UserSession.created_at).desc())
        )
        return list(result.scalars().all())

    async def touch(self, session_id: str, now: datetime) -> int:
        stmt = (
            update(UserSession)
            .where(UserSession.id == session_id)  # type: ignore[arg-type]
            .values(last_active=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def extend(self, session_id: str, expires_at: datetime, now: datetime) -> int:
        stmt = (
            update(UserSession)
            .where(UserSession.id == session_id)  # type: ignore[arg-type]
            .values(expires_at=expires_at, last_active=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_by_id(self, session_id: str) -> int:
        stmt = delete(UserSession).where(UserSession.id == session_id)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_for_user(self, user_id: str) -> int:
        stmt = delete(UserSession).where(UserSession.user_id == user_id)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def update_family_for_user(
        self,
        user_id: str,
        family_id: str | None,
        role: str | None,
        now: datetime,
    ) -> int:
        """Stamp family and role on every non-expired session of a user."""
        stmt = (
            update(UserSession)
            .where(UserSession.user_id == user_id)  # type: ignore[arg-type]
            .where(UserSession.expires_at > now)  # type: ignore[arg-type]
            .values(family_id=family_id, user_role=role)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(UserSession).where(UserSession.expires_at <= now)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
