"""Category model - tenant database."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.base import utc_now


class Category(SQLModel, table=True):
    """Expense category. New family databases are seeded with a default set."""

    __tablename__ = "categories"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, max_length=16)  # Hex color for UI
    icon: str | None = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
