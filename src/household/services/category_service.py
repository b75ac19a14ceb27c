"""Category service - expense categories in a family database."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.household.core.exceptions import AppError, Code, NotFoundError
from src.household.core.logging import get_logger
from src.household.models.base import mark_updated
from src.household.models.family import Category
from src.household.repositories import CategoryRepository

logger = get_logger(__name__)

CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
CATEGORY_EXISTS = "CATEGORY_EXISTS"
INVALID_CATEGORY = "INVALID_CATEGORY"

MAX_CATEGORY_NAME_LENGTH = 100


class CategoryService:
    """Category CRUD. ``session`` is bound to the caller's family database."""

    def __init__(self, category_repo: CategoryRepository, session: AsyncSession):
        self.category_repo = category_repo
        self.session = session

    @classmethod
    def for_session(cls, session: AsyncSession) -> "CategoryService":
        return cls(CategoryRepository(session), session)

    async def list_categories(self) -> list[Category]:
        return await self.category_repo.list_all()

    async def get_category(self, category_id: str) -> Category:
        category = await self.category_repo.get_by_id(category_id)
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND, "Category not found", Code.NOT_FOUND)
        return category

    async def create_category(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> Category:
        name = self._validate_name(name)
        if await self.category_repo.get_by_name(name) is not None:
            raise AppError(CATEGORY_EXISTS, "Category already exists", Code.ALREADY_EXISTS)

        category = Category(name=name, description=description, color=color, icon=icon)
        self.category_repo.add(category)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Category created", category_id=category.id)
        return category

    async def update_category(
        self,
        category_id: str,
        name: str | None = None,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> Category:
        """Update the given fields. Fields left as None keep their value."""
        category = await self.get_category(category_id)

        if name is not None:
            name = self._validate_name(name)
            existing = await self.category_repo.get_by_name(name)
            if existing is not None and existing.id != category_id:
                raise AppError(CATEGORY_EXISTS, "Category already exists", Code.ALREADY_EXISTS)
            category.name = name
        if description is not None:
            category.description = description
        if color is not None:
            category.color = color
        if icon is not None:
            category.icon = icon
        mark_updated(category)

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return category

    async def delete_category(self, category_id: str) -> None:
        """Delete a category. Its expenses become uncategorized."""
        category = await self.get_category(category_id)
        try:
            await self.category_repo.remove(category)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Category deleted", category_id=category_id)

    @staticmethod
    def _validate_name(name: str) -> str:
        name = name.strip()
        if not name or len(name) > MAX_CATEGORY_NAME_LENGTH:
            raise AppError(
                INVALID_CATEGORY,
                f"Category name must be between 1 and {MAX_CATEGORY_NAME_LENGTH} characters",
            )
        return name
