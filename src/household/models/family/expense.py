"""Expense model - tenant database."""

from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.base import utc_now


class Expense(SQLModel, table=True):
    """A recurring monthly bill."""

    __tablename__ = "expenses"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    category_id: str | None = Field(default=None, foreign_key="categories.id", max_length=32)
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    name: str = Field(max_length=200)
    day_of_month_due: int = Field(ge=1, le=31)
    is_autopay: bool = Field(default=False)
    # Master user id, checked against family_members on write
    created_by: str | None = Field(default=None, max_length=32)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
