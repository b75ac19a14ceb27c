"""Repository for FamilyMembership entity."""

from sqlalchemy import delete
from sqlmodel import col, select

from src.household.models.enums import MembershipRole
from src.household.models.master import FamilyMembership
from src.household.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[FamilyMembership]):
    """Repository for user-family memberships in the master database."""

    model = FamilyMembership

    async def get_membership(self, user_id: str, family_id: str) -> FamilyMembership | None:
        """Get membership for a user in a family."""
        result = await self.session.execute(
            select(FamilyMembership).where(
                FamilyMembership.user_id == user_id,
                FamilyMembership.family_id == family_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_user_membership(self, user_id: str) -> FamilyMembership | None:
        """Get the user's current membership. Users belong to at most one family."""
        result = await self.session.execute(
            select(FamilyMembership)
            .where(FamilyMembership.user_id == user_id)
            .order_by(col(FamilyMembership.joined_at).desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_family_members(self, family_id: str) -> list[FamilyMembership]:
        result = await self.session.execute(
            select(FamilyMembership)
            .where(FamilyMembership.family_id == family_id)
            .order_by(col(FamilyMembership.joined_at))
        )
        return list(result.scalars().all())

    async def count_family_members(self, family_id: str) -> int:
        return len(await self.list_family_members(family_id))

    def create_membership(
        self,
        user_id: str,
        family_id: str,
        role: str = MembershipRole.MEMBER.value,
    ) -> FamilyMembership:
        """Create a membership (no flush/commit)."""
        membership = FamilyMembership(user_id=user_id, family_id=family_id, role=role)
        self.add(membership)
        return membership

    async def delete_membership(self, user_id: str, family_id: str) -> int:
        stmt = delete(FamilyMembership).where(
            FamilyMembership.user_id == user_id,  # type: ignore[arg-type]
            FamilyMembership.family_id == family_id,  # type: ignore[arg-type]
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
