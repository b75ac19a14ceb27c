"""User model - accounts live in the master database."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.base import utc_now


class User(SQLModel, table=True):
    """A registered account. Email is stored normalized (trimmed, lowercase)."""

    __tablename__ = "users"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    email: str = Field(max_length=255, unique=True, index=True)
    name: str = Field(max_length=100)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
