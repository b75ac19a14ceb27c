"""budget.v1.BudgetService procedures. Any member reads; managers write."""

from fastapi import APIRouter

from src.household.api.context import FamilyAuth, ManagerAuth
from src.household.api.dependencies import BudgetServiceDep
from src.household.schemas.base import SuccessResponse
from src.household.schemas.budget import (
    BudgetInfo,
    BudgetRequest,
    BudgetResponse,
    CreateBudgetRequest,
    ListBudgetsRequest,
    ListBudgetsResponse,
    UpdateBudgetRequest,
)

router = APIRouter(prefix="/budget.v1.BudgetService", tags=["budget"])


@router.post("/ListBudgets", response_model=ListBudgetsResponse)
async def list_budgets(
    auth: FamilyAuth, service: BudgetServiceDep, body: ListBudgetsRequest | None = None
) -> ListBudgetsResponse:
    budgets = await service.list_budgets(body.category_id if body else None)
    return ListBudgetsResponse(budgets=[BudgetInfo.model_validate(b) for b in budgets])


@router.post("/GetBudget", response_model=BudgetResponse)
async def get_budget(
    body: BudgetRequest, auth: FamilyAuth, service: BudgetServiceDep
) -> BudgetResponse:
    budget = await service.get_budget(body.id)
    return BudgetResponse(budget=BudgetInfo.model_validate(budget))


@router.post("/CreateBudget", response_model=BudgetResponse)
async def create_budget(
    body: CreateBudgetRequest, auth: ManagerAuth, service: BudgetServiceDep
) -> BudgetResponse:
    budget = await service.create_budget(
        category_id=body.category_id,
        amount=body.amount,
        period=body.period,
        starts_on=body.starts_on,
    )
    return BudgetResponse(budget=BudgetInfo.model_validate(budget))


@router.post("/UpdateBudget", response_model=BudgetResponse)
async def update_budget(
    body: UpdateBudgetRequest, auth: ManagerAuth, service: BudgetServiceDep
) -> BudgetResponse:
    budget = await service.update_budget(
        body.id,
        category_id=body.category_id,
        amount=body.amount,
        period=body.period,
        starts_on=body.starts_on,
    )
    return BudgetResponse(budget=BudgetInfo.model_validate(budget))


@router.post("/DeleteBudget", response_model=SuccessResponse)
async def delete_budget(
    body: BudgetRequest, auth: ManagerAuth, service: BudgetServiceDep
) -> SuccessResponse:
    await service.delete_budget(body.id)
    return SuccessResponse()
