"""Budget model - tenant database."""

from datetime import date, datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.base import utc_now
from src.household.models.enums import BudgetPeriod


class Budget(SQLModel, table=True):
    """Spending limit for one category over a recurring period.

    Deleting the category deletes its budgets.
    """

    __tablename__ = "budgets"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    category_id: str = Field(foreign_key="categories.id", index=True, max_length=32)
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    period: str = Field(default=BudgetPeriod.MONTHLY.value, max_length=20)
    starts_on: date | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
