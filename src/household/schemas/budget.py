from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from src.household.models.enums import BudgetPeriod
from src.household.schemas.base import RpcModel


class BudgetInfo(RpcModel):
    id: str
    category_id: str
    amount: Decimal
    period: str
    starts_on: date | None = None
    created_at: datetime
    updated_at: datetime


class CreateBudgetRequest(RpcModel):
    category_id: str
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    period: str = BudgetPeriod.MONTHLY.value
    starts_on: date | None = None


class UpdateBudgetRequest(RpcModel):
    id: str
    category_id: str | None = None
    amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    period: str | None = None
    starts_on: date | None = None


class BudgetRequest(RpcModel):
    id: str


class ListBudgetsRequest(RpcModel):
    category_id: str | None = None


class BudgetResponse(RpcModel):
    budget: BudgetInfo


class ListBudgetsResponse(RpcModel):
    budgets: list[BudgetInfo]
