from datetime import datetime
from decimal import Decimal

from pydantic import Field

from src.household.schemas.base import RpcModel


class ExpenseInfo(RpcModel):
    id: str
    category_id: str | None = None
    amount: Decimal
    name: str
    day_of_month_due: int
    is_autopay: bool
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class CreateExpenseRequest(RpcModel):
    name: str = Field(max_length=200)
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    day_of_month_due: int
    category_id: str | None = None
    is_autopay: bool = False


class UpdateExpenseRequest(RpcModel):
    id: str
    name: str | None = Field(default=None, max_length=200)
    amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    day_of_month_due: int | None = None
    category_id: str | None = None
    is_autopay: bool | None = None


class ExpenseRequest(RpcModel):
    id: str


class ListExpensesRequest(RpcModel):
    category_id: str | None = None


class ExpenseResponse(RpcModel):
    expense: ExpenseInfo


class ListExpensesResponse(RpcModel):
    expenses: list[ExpenseInfo]
