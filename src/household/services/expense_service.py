"""Expense service - recurring monthly bills in a family database.

Expenses reference two things by id: a category in the same database, and the
master user that created them. The user reference crosses databases, so it is
checked here against the family's ``family_members`` mirror on every write
rather than by a foreign key.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.household.core.exceptions import AppError, Code, NotFoundError
from src.household.core.logging import get_logger
from src.household.models.base import mark_updated
from src.household.models.family import Expense
from src.household.repositories import (
    CategoryRepository,
    ExpenseRepository,
    FamilyMemberRepository,
)

logger = get_logger(__name__)

EXPENSE_NOT_FOUND = "EXPENSE_NOT_FOUND"
INVALID_EXPENSE = "INVALID_EXPENSE"
INVALID_CATEGORY = "INVALID_CATEGORY"
INVALID_MEMBER = "INVALID_MEMBER"


class ExpenseService:
    def __init__(
        self,
        expense_repo: ExpenseRepository,
        category_repo: CategoryRepository,
        member_repo: FamilyMemberRepository,
        session: AsyncSession,
    ):
        self.expense_repo = expense_repo
        self.category_repo = category_repo
        self.member_repo = member_repo
        self.session = session

    @classmethod
    def for_session(cls, session: AsyncSession) -> "ExpenseService":
        return cls(
            ExpenseRepository(session),
            CategoryRepository(session),
            FamilyMemberRepository(session),
            session,
        )

    async def create_expense(
        self,
        *,
        name: str,
        amount: Decimal,
        day_of_month_due: int,
        created_by: str,
        category_id: str | None = None,
        is_autopay: bool = False,
    ) -> Expense:
        """Create an expense.

        Raises:
            AppError: INVALID_EXPENSE, INVALID_CATEGORY or INVALID_MEMBER.
        """
        name = self._validate(name, amount, day_of_month_due)
        await self._check_category(category_id)
        await self._check_member(created_by)

        expense = Expense(
            name=name,
            amount=amount,
            day_of_month_due=day_of_month_due,
            category_id=category_id,
            is_autopay=is_autopay,
            created_by=created_by,
        )
        self.expense_repo.add(expense)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Expense created", expense_id=expense.id, category_id=category_id)
        return expense

    async def get_expense(self, expense_id: str) -> Expense:
        expense = await self.expense_repo.get_by_id(expense_id)
        if expense is None:
            raise NotFoundError(EXPENSE_NOT_FOUND, "Expense not found", Code.NOT_FOUND)
        return expense

    async def list_expenses(self, category_id: str | None = None) -> list[Expense]:
        return await self.expense_repo.list_all(category_id)

    async def update_expense(
        self,
        expense_id: str,
        *,
        name: str | None = None,
        amount: Decimal | None = None,
        day_of_month_due: int | None = None,
        category_id: str | None = None,
        is_autopay: bool | None = None,
    ) -> Expense:
        """Update the given fields. Fields left as None keep their value."""
        expense = await self.get_expense(expense_id)

        new_name = self._validate(
            name if name is not None else expense.name,
            amount if amount is not None else expense.amount,
            day_of_month_due if day_of_month_due is not None else expense.day_of_month_due,
        )
        if category_id is not None:
            await self._check_category(category_id)
            expense.category_id = category_id

        expense.name = new_name
        if amount is not None:
            expense.amount = amount
        if day_of_month_due is not None:
            expense.day_of_month_due = day_of_month_due
        if is_autopay is not None:
            expense.is_autopay = is_autopay
        mark_updated(expense)

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return expense

    async def delete_expense(self, expense_id: str) -> None:
        expense = await self.get_expense(expense_id)
        try:
            await self.expense_repo.remove(expense)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Expense deleted", expense_id=expense_id)

    @staticmethod
    def _validate(name: str, amount: Decimal, day_of_month_due: int) -> str:
        name = name.strip()
        if not name:
            raise AppError(INVALID_EXPENSE, "Expense name is required")
        if amount < 0:
            raise AppError(INVALID_EXPENSE, "Expense amount cannot be negative")
        if not 1 <= day_of_month_due <= 31:
            raise AppError(INVALID_EXPENSE, "Day of month due must be between 1 and 31")
        return name

    async def _check_category(self, category_id: str | None) -> None:
        if category_id is None:
            return
        if await self.category_repo.get_by_id(category_id) is None:
            raise AppError(INVALID_CATEGORY, "Category does not exist")

    async def _check_member(self, user_id: str) -> None:
        if not await self.member_repo.is_active_member(user_id):
            raise AppError(
                INVALID_MEMBER,
                "User is not an active member of this family",
                Code.PERMISSION_DENIED,
            )
