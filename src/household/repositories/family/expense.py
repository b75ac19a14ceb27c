"""Repository for Expense entity (tenant database)."""

from sqlmodel import col, select

from src.household.models.family import Expense
from src.household.repositories.base import BaseRepository


class ExpenseRepository(BaseRepository[Expense]):
    """Repository for Expense entity in a family database."""

    model = Expense

    async def list_all(self, category_id: str | None = None) -> list[Expense]:
        """List expenses ordered by due day, optionally for one category."""
        query = select(Expense)
        if category_id is not None:
            query = query.where(Expense.category_id == category_id)
        result = await self.session.execute(
            query.order_by(col(Expense.day_of_month_due), col(Expense.name))
        )
        return list(result.scalars().all())
