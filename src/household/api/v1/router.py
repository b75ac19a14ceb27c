from fastapi import APIRouter

from src.household.api.v1 import auth, budget, category, expense, family, health, settings

rpc_router = APIRouter()
rpc_router.include_router(auth.router)
rpc_router.include_router(family.router)
rpc_router.include_router(category.router)
rpc_router.include_router(expense.router)
rpc_router.include_router(budget.router)
rpc_router.include_router(settings.router)
rpc_router.include_router(health.router)
