"""Repository for Budget entity (tenant database)."""

from sqlmodel import col, select

from src.household.models.family import Budget
from src.household.repositories.base import BaseRepository


class BudgetRepository(BaseRepository[Budget]):
    model = Budget

    async def list_all(self, category_id: str | None = None) -> list[Budget]:
        """List budgets, optionally for one category, oldest first."""
        stmt = select(Budget).order_by(col(Budget.created_at))
        if category_id is not None:
            stmt = stmt.where(Budget.category_id == category_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_category_and_period(self, category_id: str, period: str) -> Budget | None:
        result = await self.session.execute(
            select(Budget).where(Budget.category_id == category_id, Budget.period == period)
        )
        return result.scalar_one_or_none()
