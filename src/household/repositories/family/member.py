"""Repository for FamilyMember entity (tenant database)."""

from sqlmodel import col, select

from src.household.models.family import FamilyMember
from src.household.repositories.base import BaseRepository


class FamilyMemberRepository(BaseRepository[FamilyMember]):
    """Tenant-side mirror of master memberships."""

    model = FamilyMember

    async def list_active(self) -> list[FamilyMember]:
        result = await self.session.execute(
            select(FamilyMember)
            .where(col(FamilyMember.is_active).is_(True))
            .order_by(col(FamilyMember.joined_at))
        )
        return list(result.scalars().all())

    async def is_active_member(self, user_id: str) -> bool:
        member = await self.get_by_id(user_id)
        return member is not None and member.is_active
