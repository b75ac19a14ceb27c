"""Repository for Category entity (tenant database)."""

from sqlalchemy import func
from sqlmodel import col, select

from src.household.models.family import Category
from src.household.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category entity in a family database."""

    model = Category

    async def list_all(self) -> list[Category]:
        result = await self.session.execute(select(Category).order_by(col(Category.name)))
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Category | None:
        """Get category by name, case-insensitively."""
        result = await self.session.execute(
            select(Category).where(func.lower(Category.name) == name.lower())
        )
        return result.scalar_one_or_none()
