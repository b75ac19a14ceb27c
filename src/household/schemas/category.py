from datetime import datetime

from pydantic import Field

from src.household.schemas.base import RpcModel


class CategoryInfo(RpcModel):
    id: str
    name: str
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    created_at: datetime
    updated_at: datetime


class ListCategoriesResponse(RpcModel):
    categories: list[CategoryInfo]


class CreateCategoryRequest(RpcModel):
    name: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, max_length=16)
    icon: str | None = Field(default=None, max_length=64)


class UpdateCategoryRequest(RpcModel):
    id: str
    name: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, max_length=16)
    icon: str | None = Field(default=None, max_length=64)


class CategoryRequest(RpcModel):
    id: str


class CategoryResponse(RpcModel):
    category: CategoryInfo
