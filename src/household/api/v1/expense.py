"""expense.v1.ExpenseService procedures, scoped to the caller's family."""

from fastapi import APIRouter

from src.household.api.context import FamilyAuth
from src.household.api.dependencies import ExpenseServiceDep
from src.household.schemas.base import SuccessResponse
from src.household.schemas.expense import (
    CreateExpenseRequest,
    ExpenseInfo,
    ExpenseRequest,
    ExpenseResponse,
    ListExpensesRequest,
    ListExpensesResponse,
    UpdateExpenseRequest,
)

router = APIRouter(prefix="/expense.v1.ExpenseService", tags=["expense"])


@router.post("/CreateExpense", response_model=ExpenseResponse)
async def create_expense(
    body: CreateExpenseRequest, auth: FamilyAuth, service: ExpenseServiceDep
) -> ExpenseResponse:
    """Create an expense attributed to the caller."""
    expense = await service.create_expense(
        name=body.name,
        amount=body.amount,
        day_of_month_due=body.day_of_month_due,
        category_id=body.category_id,
        is_autopay=body.is_autopay,
        created_by=auth.user_id,
    )
    return ExpenseResponse(expense=ExpenseInfo.model_validate(expense))


@router.post("/GetExpense", response_model=ExpenseResponse)
async def get_expense(
    body: ExpenseRequest, auth: FamilyAuth, service: ExpenseServiceDep
) -> ExpenseResponse:
    expense = await service.get_expense(body.id)
    return ExpenseResponse(expense=ExpenseInfo.model_validate(expense))


@router.post("/ListExpenses", response_model=ListExpensesResponse)
async def list_expenses(
    auth: FamilyAuth, service: ExpenseServiceDep, body: ListExpensesRequest | None = None
) -> ListExpensesResponse:
    expenses = await service.list_expenses(body.category_id if body else None)
    return ListExpensesResponse(expenses=[ExpenseInfo.model_validate(e) for e in expenses])


@router.post("/UpdateExpense", response_model=ExpenseResponse)
async def update_expense(
    body: UpdateExpenseRequest, auth: FamilyAuth, service: ExpenseServiceDep
) -> ExpenseResponse:
    expense = await service.update_expense(
        body.id,
        name=body.name,
        amount=body.amount,
        day_of_month_due=body.day_of_month_due,
        category_id=body.category_id,
        is_autopay=body.is_autopay,
    )
    return ExpenseResponse(expense=ExpenseInfo.model_validate(expense))


@router.post("/DeleteExpense", response_model=SuccessResponse)
async def delete_expense(
    body: ExpenseRequest, auth: FamilyAuth, service: ExpenseServiceDep
) -> SuccessResponse:
    await service.delete_expense(body.id)
    return SuccessResponse()
