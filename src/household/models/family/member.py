"""Family member model - tenant database mirror of master memberships."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.household.models.base import utc_now
from src.household.models.enums import MembershipRole


class FamilyMember(SQLModel, table=True):
    """Denormalized copy of a master membership.

    ``id`` is the master user id. There is no foreign key across databases;
    rows are only written from a membership that was validated in the master
    database.
    """

    __tablename__ = "family_members"

    id: str = Field(primary_key=True, max_length=32)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255)
    role: str = Field(default=MembershipRole.MEMBER.value, max_length=20)
    joined_at: datetime = Field(default_factory=utc_now)
    is_active: bool = Field(default=True)
