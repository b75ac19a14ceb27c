"""Login session model - master database."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.base import utc_now


class UserSession(SQLModel, table=True):
    """A login session.

    ``family_id`` and ``user_role`` are a snapshot taken at login and pushed
    forward by ``AuthService.update_user_family_sessions`` when membership
    changes. ``session_token`` holds the SHA-256 digest of the token handed to
    the client, never the token itself. Sessions created before opaque tokens
    existed have a numeric ``id`` and no ``session_token``.
    """

    __tablename__ = "user_sessions"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=32)
    family_id: str | None = Field(default=None, max_length=32)
    user_role: str | None = Field(default=None, max_length=20)
    created_at: datetime = Field(default_factory=utc_now)
    last_active: datetime = Field(default_factory=utc_now)
    expires_at: datetime = Field(index=True)
    user_agent: str | None = Field(default=None, max_length=512)
    ip_address: str | None = Field(default=None, max_length=64)
    session_token: str | None = Field(default=None, unique=True, index=True, max_length=64)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
