"""Repository for FamilySetting entity (tenant database)."""

from sqlmodel import col, select

from src.household.models.family import FamilySetting
from src.household.repositories.base import BaseRepository


class FamilySettingRepository(BaseRepository[FamilySetting]):
    model = FamilySetting

    async def get_by_key(self, key: str) -> FamilySetting | None:
        result = await self.session.execute(
            select(FamilySetting).where(FamilySetting.setting_key == key)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[FamilySetting]:
        result = await self.session.execute(
            select(FamilySetting).order_by(col(FamilySetting.setting_key))
        )
        return list(result.scalars().all())
