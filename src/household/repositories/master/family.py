"""Repository for Family entity."""

from sqlmodel import col, select

from src.household.models.master import Family
from src.household.repositories.base import BaseRepository


class FamilyRepository(BaseRepository[Family]):
    """Repository for families in the master database."""

    model = Family

    async def get_by_invite_code(self, invite_code: str) -> Family | None:
        result = await self.session.execute(
            select(Family).where(Family.invite_code == invite_code)
        )
        return result.scalar_one_or_none()

    async def invite_code_exists(self, invite_code: str) -> bool:
        return await self.get_by_invite_code(invite_code) is not None

    async def list_all(self) -> list[Family]:
        result = await self.session.execute(select(Family).order_by(col(Family.created_at)))
        return list(result.scalars().all())
