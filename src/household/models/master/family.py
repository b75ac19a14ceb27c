"""Family and membership models - master database."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.base import utc_now
from src.household.models.enums import MembershipRole


class Family(SQLModel, table=True):
    """A shared accounting group backed by its own tenant database.

    ``database_url`` and ``schema_version`` are the registry's durable state:
    the URL is written in the same transaction that creates the family, and the
    version only moves forward as tenant migrations are applied.
    """

    __tablename__ = "families"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    name: str = Field(max_length=100)
    invite_code: str = Field(max_length=64, unique=True, index=True)
    database_url: str = Field(max_length=1024)
    manager_id: str = Field(foreign_key="users.id", max_length=32)
    schema_version: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class FamilyMembership(SQLModel, table=True):
    """Junction table for user-family membership. At most one row per user."""

    __tablename__ = "family_memberships"

    family_id: str = Field(foreign_key="families.id", primary_key=True, max_length=32)
    user_id: str = Field(foreign_key="users.id", primary_key=True, max_length=32)
    role: str = Field(default=MembershipRole.MEMBER.value, max_length=20)
    joined_at: datetime = Field(default_factory=utc_now)
