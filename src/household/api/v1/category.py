"""category.v1.CategoryService procedures, scoped to the caller's family."""

from fastapi import APIRouter

from src.household.api.context import FamilyAuth
from src.household.api.dependencies import CategoryServiceDep
from src.household.schemas.base import EmptyRequest, SuccessResponse
from src.household.schemas.category import (
    CategoryInfo,
    CategoryRequest,
    CategoryResponse,
    CreateCategoryRequest,
    ListCategoriesResponse,
    UpdateCategoryRequest,
)

router = APIRouter(prefix="/category.v1.CategoryService", tags=["category"])


@router.post("/ListCategories", response_model=ListCategoriesResponse)
async def list_categories(
    auth: FamilyAuth, service: CategoryServiceDep, body: EmptyRequest | None = None
) -> ListCategoriesResponse:
    categories = await service.list_categories()
    return ListCategoriesResponse(categories=[CategoryInfo.model_validate(c) for c in categories])


@router.post("/CreateCategory", response_model=CategoryResponse)
async def create_category(
    body: CreateCategoryRequest, auth: FamilyAuth, service: CategoryServiceDep
) -> CategoryResponse:
    category = await service.create_category(
        body.name, description=body.description, color=body.color, icon=body.icon
    )
    return CategoryResponse(category=CategoryInfo.model_validate(category))


@router.post("/UpdateCategory", response_model=CategoryResponse)
async def update_category(
    body: UpdateCategoryRequest, auth: FamilyAuth, service: CategoryServiceDep
) -> CategoryResponse:
    category = await service.update_category(
        body.id,
        name=body.name,
        description=body.description,
        color=body.color,
        icon=body.icon,
    )
    return CategoryResponse(category=CategoryInfo.model_validate(category))


@router.post("/DeleteCategory", response_model=SuccessResponse)
async def delete_category(
    body: CategoryRequest, auth: FamilyAuth, service: CategoryServiceDep
) -> SuccessResponse:
    await service.delete_category(body.id)
    return SuccessResponse()
