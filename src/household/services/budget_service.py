"""Budget service - per-category spending limits in a family database.

A category has at most one budget per period. The limit is a positive amount
with two decimal places; spending against it is computed by clients from the
family's expenses.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.household.core.exceptions import AppError, Code, NotFoundError
from src.household.core.logging import get_logger
from src.household.models.base import mark_updated
from src.household.models.enums import BudgetPeriod
from src.household.models.family import Budget
from src.household.repositories import BudgetRepository, CategoryRepository

logger = get_logger(__name__)

BUDGET_NOT_FOUND = "BUDGET_NOT_FOUND"
BUDGET_EXISTS = "BUDGET_EXISTS"
INVALID_BUDGET = "INVALID_BUDGET"
INVALID_CATEGORY = "INVALID_CATEGORY"


class BudgetService:
    def __init__(
        self,
        budget_repo: BudgetRepository,
        category_repo: CategoryRepository,
        session: AsyncSession,
    ):
        self.budget_repo = budget_repo
        self.category_repo = category_repo
        self.session = session

    @classmethod
    def for_session(cls, session: AsyncSession) -> "BudgetService":
        return cls(BudgetRepository(session), CategoryRepository(session), session)

    async def list_budgets(self, category_id: str | None = None) -> list[Budget]:
        return await self.budget_repo.list_all(category_id)

    async def get_budget(self, budget_id: str) -> Budget:
        budget = await self.budget_repo.get_by_id(budget_id)
        if budget is None:
            raise NotFoundError(BUDGET_NOT_FOUND, "Budget not found", Code.NOT_FOUND)
        return budget

    async def create_budget(
        self,
        *,
        category_id: str,
        amount: Decimal,
        period: str = BudgetPeriod.MONTHLY.value,
        starts_on: date | None = None,
    ) -> Budget:
        """Create a budget.

        Raises:
            AppError: INVALID_BUDGET, INVALID_CATEGORY or BUDGET_EXISTS.
        """
        period = self._validate(amount, period)
        await self._check_category(category_id)
        await self._check_unique(category_id, period)

        budget = Budget(category_id=category_id, amount=amount, period=period, starts_on=starts_on)
        self.budget_repo.add(budget)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Budget created", budget_id=budget.id, category_id=category_id, period=period)
        return budget

    async def update_budget(
        self,
        budget_id: str,
        *,
        category_id: str | None = None,
        amount: Decimal | None = None,
        period: str | None = None,
        starts_on: date | None = None,
    ) -> Budget:
        """Update the given fields. Fields left as None keep their value."""
        budget = await self.get_budget(budget_id)

        new_period = self._validate(
            amount if amount is not None else budget.amount,
            period if period is not None else budget.period,
        )
        new_category = category_id if category_id is not None else budget.category_id
        if category_id is not None:
            await self._check_category(category_id)
        if (new_category, new_period) != (budget.category_id, budget.period):
            await self._check_unique(new_category, new_period)

        budget.category_id = new_category
        budget.period = new_period
        if amount is not None:
            budget.amount = amount
        if starts_on is not None:
            budget.starts_on = starts_on
        mark_updated(budget)

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return budget

    async def delete_budget(self, budget_id: str) -> None:
        budget = await self.get_budget(budget_id)
        try:
            await self.budget_repo.remove(budget)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Budget deleted", budget_id=budget_id)

    @staticmethod
    def _validate(amount: Decimal, period: str) -> str:
        if amount <= 0:
            raise AppError(INVALID_BUDGET, "Budget amount must be positive")
        try:
            return BudgetPeriod(period).value
        except ValueError as e:
            allowed = ", ".join(p.value for p in BudgetPeriod)
            raise AppError(INVALID_BUDGET, f"Budget period must be one of: {allowed}") from e

    async def _check_category(self, category_id: str) -> None:
        if await self.category_repo.get_by_id(category_id) is None:
            raise AppError(INVALID_CATEGORY, "Category does not exist")

    async def _check_unique(self, category_id: str, period: str) -> None:
        if await self.budget_repo.get_by_category_and_period(category_id, period) is not None:
            raise AppError(
                BUDGET_EXISTS,
                f"Category already has a {period} budget",
                Code.ALREADY_EXISTS,
            )
