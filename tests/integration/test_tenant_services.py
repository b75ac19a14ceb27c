"""Tests for the family-scoped services: categories, expenses, budgets and settings."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from src.household.core.db import TenantRegistry, get_session
from src.household.core.exceptions import AppError, Code, NotFoundError
from src.household.models.master import Family, User
from src.household.services import (
    BudgetService,
    CategoryService,
    ExpenseService,
    SettingsService,
)
from tests.factories import FamilyMemberFactory

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

DEFAULT_CATEGORY_COUNT = 8


@pytest.fixture
async def tenant_engine(registry: TenantRegistry, family: Family) -> AsyncEngine:
    return await registry.resolve(family.id)


async def add_expense(engine: AsyncEngine, created_by: str, **kwargs) -> str:
    fields = {"name": "Rent", "amount": Decimal("1200.00"), "day_of_month_due": 1, **kwargs}
    async with get_session(engine) as session:
        expense = await ExpenseService.for_session(session).create_expense(
            created_by=created_by, **fields
        )
    return expense.id


class TestCategories:
    async def test_new_family_has_default_categories(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            categories = await CategoryService.for_session(session).list_categories()

        assert len(categories) == DEFAULT_CATEGORY_COUNT
        assert [c.name for c in categories] == sorted(c.name for c in categories)
        assert "default-food" in {c.id for c in categories}

    async def test_create_and_get(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            created = await CategoryService.for_session(session).create_category(
                "  Pets ", description="Vet and food", color="#123456", icon="paw"
            )
        async with get_session(tenant_engine) as session:
            fetched = await CategoryService.for_session(session).get_category(created.id)

        assert fetched.name == "Pets"
        assert fetched.color == "#123456"

    async def test_duplicate_name_is_case_insensitive(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(AppError) as exc_info:
                await CategoryService.for_session(session).create_category("food & dining")

        assert exc_info.value.code == "CATEGORY_EXISTS"
        assert exc_info.value.status == Code.ALREADY_EXISTS

    async def test_update_keeps_unset_fields(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            updated = await CategoryService.for_session(session).update_category(
                "default-other", name="Misc"
            )

        assert updated.name == "Misc"
        assert updated.icon == "more-horizontal"

    async def test_update_to_existing_name(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(AppError) as exc_info:
                await CategoryService.for_session(session).update_category(
                    "default-other", name="Shopping"
                )

        assert exc_info.value.code == "CATEGORY_EXISTS"

    async def test_blank_name(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(AppError) as exc_info:
                await CategoryService.for_session(session).create_category("   ")

        assert exc_info.value.code == "INVALID_CATEGORY"

    async def test_delete_uncategorizes_expenses(
        self, tenant_engine: AsyncEngine, manager: User
    ) -> None:
        expense_id = await add_expense(tenant_engine, manager.id, category_id="default-utilities")

        async with get_session(tenant_engine) as session:
            await CategoryService.for_session(session).delete_category("default-utilities")
        async with get_session(tenant_engine) as session:
            expense = await ExpenseService.for_session(session).get_expense(expense_id)

        assert expense.category_id is None

    async def test_get_missing(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(NotFoundError) as exc_info:
                await CategoryService.for_session(session).get_category("missing")

        assert exc_info.value.status == Code.NOT_FOUND


class TestExpenses:
    async def test_create_by_member(self, tenant_engine: AsyncEngine, manager: User) -> None:
        expense_id = await add_expense(
            tenant_engine, manager.id, category_id="default-utilities", is_autopay=True
        )

        async with get_session(tenant_engine) as session:
            expense = await ExpenseService.for_session(session).get_expense(expense_id)

        assert expense.name == "Rent"
        assert expense.amount == Decimal("1200.00")
        assert expense.is_autopay
        assert expense.created_by == manager.id

    async def test_non_member_cannot_create(self, tenant_engine: AsyncEngine) -> None:
        with pytest.raises(AppError) as exc_info:
            await add_expense(tenant_engine, "stranger")

        assert exc_info.value.code == "INVALID_MEMBER"
        assert exc_info.value.status == Code.PERMISSION_DENIED

    async def test_inactive_member_cannot_create(self, tenant_engine: AsyncEngine) -> None:
        former = FamilyMemberFactory.inactive()
        async with get_session(tenant_engine) as session:
            session.add(former)
            await session.commit()

        with pytest.raises(AppError) as exc_info:
            await add_expense(tenant_engine, former.id)

        assert exc_info.value.code == "INVALID_MEMBER"

    async def test_unknown_category(self, tenant_engine: AsyncEngine, manager: User) -> None:
        with pytest.raises(AppError) as exc_info:
            await add_expense(tenant_engine, manager.id, category_id="missing")

        assert exc_info.value.code == "INVALID_CATEGORY"

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "  "},
            {"amount": Decimal("-1")},
            {"day_of_month_due": 0},
            {"day_of_month_due": 32},
        ],
    )
    async def test_invalid_expense(
        self, tenant_engine: AsyncEngine, manager: User, fields: dict
    ) -> None:
        with pytest.raises(AppError) as exc_info:
            await add_expense(tenant_engine, manager.id, **fields)

        assert exc_info.value.code == "INVALID_EXPENSE"

    async def test_list_orders_by_due_day_and_filters(
        self, tenant_engine: AsyncEngine, manager: User
    ) -> None:
        await add_expense(
            tenant_engine,
            manager.id,
            name="Internet",
            day_of_month_due=15,
            category_id="default-utilities",
        )
        await add_expense(tenant_engine, manager.id, name="Rent", day_of_month_due=1)

        async with get_session(tenant_engine) as session:
            service = ExpenseService.for_session(session)
            everything = await service.list_expenses()
            utilities = await service.list_expenses("default-utilities")

        assert [e.name for e in everything] == ["Rent", "Internet"]
        assert [e.name for e in utilities] == ["Internet"]

    async def test_update_and_delete(self, tenant_engine: AsyncEngine, manager: User) -> None:
        expense_id = await add_expense(tenant_engine, manager.id)

        async with get_session(tenant_engine) as session:
            updated = await ExpenseService.for_session(session).update_expense(
                expense_id, amount=Decimal("1250.50"), day_of_month_due=3
            )
        assert updated.amount == Decimal("1250.50")
        assert updated.name == "Rent"

        async with get_session(tenant_engine) as session:
            await ExpenseService.for_session(session).delete_expense(expense_id)
        async with get_session(tenant_engine) as session:
            with pytest.raises(NotFoundError) as exc_info:
                await ExpenseService.for_session(session).get_expense(expense_id)

        assert exc_info.value.code == "EXPENSE_NOT_FOUND"


class TestBudgets:
    async def test_create_defaults_to_monthly(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            created = await BudgetService.for_session(session).create_budget(
                category_id="default-food", amount=Decimal("450.00")
            )
        async with get_session(tenant_engine) as session:
            fetched = await BudgetService.for_session(session).get_budget(created.id)

        assert fetched.period == "monthly"
        assert fetched.amount == Decimal("450.00")
        assert fetched.starts_on is None

    async def test_one_budget_per_category_and_period(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            service = BudgetService.for_session(session)
            await service.create_budget(category_id="default-food", amount=Decimal("450"))
            weekly = await service.create_budget(
                category_id="default-food",
                amount=Decimal("100"),
                period="weekly",
                starts_on=date(2026, 1, 5),
            )
            with pytest.raises(AppError) as exc_info:
                await service.create_budget(category_id="default-food", amount=Decimal("500"))

        assert weekly.starts_on == date(2026, 1, 5)
        assert exc_info.value.code == "BUDGET_EXISTS"
        assert exc_info.value.status == Code.ALREADY_EXISTS

    @pytest.mark.parametrize(
        ("amount", "period"),
        [(Decimal("0"), "monthly"), (Decimal("-5"), "monthly"), (Decimal("10"), "daily")],
    )
    async def test_invalid_budget(
        self, tenant_engine: AsyncEngine, amount: Decimal, period: str
    ) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(AppError) as exc_info:
                await BudgetService.for_session(session).create_budget(
                    category_id="default-food", amount=amount, period=period
                )

        assert exc_info.value.code == "INVALID_BUDGET"

    async def test_unknown_category(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(AppError) as exc_info:
                await BudgetService.for_session(session).create_budget(
                    category_id="missing", amount=Decimal("10")
                )

        assert exc_info.value.code == "INVALID_CATEGORY"

    async def test_update_list_and_delete(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            service = BudgetService.for_session(session)
            food = await service.create_budget(category_id="default-food", amount=Decimal("450"))
            await service.create_budget(category_id="default-utilities", amount=Decimal("200"))

            updated = await service.update_budget(food.id, amount=Decimal("475.50"))
            food_only = await service.list_budgets("default-food")
            await service.delete_budget(food.id)
            remaining = await service.list_budgets()

        assert updated.amount == Decimal("475.50")
        assert updated.period == "monthly"
        assert [b.id for b in food_only] == [food.id]
        assert [b.category_id for b in remaining] == ["default-utilities"]

    async def test_update_into_taken_period(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            service = BudgetService.for_session(session)
            await service.create_budget(category_id="default-food", amount=Decimal("450"))
            yearly = await service.create_budget(
                category_id="default-food", amount=Decimal("5000"), period="yearly"
            )
            with pytest.raises(AppError) as exc_info:
                await service.update_budget(yearly.id, period="monthly")

        assert exc_info.value.code == "BUDGET_EXISTS"

    async def test_deleting_category_deletes_its_budgets(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            budget = await BudgetService.for_session(session).create_budget(
                category_id="default-food", amount=Decimal("450")
            )
        async with get_session(tenant_engine) as session:
            await CategoryService.for_session(session).delete_category("default-food")
        async with get_session(tenant_engine) as session:
            with pytest.raises(NotFoundError) as exc_info:
                await BudgetService.for_session(session).get_budget(budget.id)

        assert exc_info.value.code == "BUDGET_NOT_FOUND"


class TestSettings:
    async def test_set_get_and_replace(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            await SettingsService.for_session(session).set_setting("currency", "USD")
        async with get_session(tenant_engine) as session:
            await SettingsService.for_session(session).set_setting(
                "reminder_days", "3", "integer"
            )
        async with get_session(tenant_engine) as session:
            await SettingsService.for_session(session).set_setting("currency", "EUR")

        async with get_session(tenant_engine) as session:
            service = SettingsService.for_session(session)
            currency = await service.get_setting("currency")
            keys = [s.setting_key for s in await service.list_settings()]

        assert currency.setting_value == "EUR"
        assert currency.data_type == "string"
        assert sorted(keys) == ["currency", "reminder_days"]

    @pytest.mark.parametrize(
        ("value", "data_type"),
        [
            ("three", "integer"),
            ("yes", "boolean"),
            ("{not json", "json"),
            ("x", "datetime"),
        ],
    )
    async def test_value_must_match_type(
        self, tenant_engine: AsyncEngine, value: str, data_type: str
    ) -> None:
        async with get_session(tenant_engine) as session:
            with pytest.raises(AppError) as exc_info:
                await SettingsService.for_session(session).set_setting("key", value, data_type)

        assert exc_info.value.code == "INVALID_SETTING"

    @pytest.mark.parametrize(
        ("value", "data_type"),
        [("42", "integer"), ("TRUE", "boolean"), ('{"a": [1, 2]}', "json"), (None, "integer")],
    )
    async def test_valid_typed_values(
        self, tenant_engine: AsyncEngine, value: str | None, data_type: str
    ) -> None:
        async with get_session(tenant_engine) as session:
            setting = await SettingsService.for_session(session).set_setting(
                "key", value, data_type
            )

        assert setting.setting_value == value
        assert setting.data_type == data_type

    async def test_delete(self, tenant_engine: AsyncEngine) -> None:
        async with get_session(tenant_engine) as session:
            await SettingsService.for_session(session).set_setting("currency", "USD")
        async with get_session(tenant_engine) as session:
            await SettingsService.for_session(session).delete_setting("currency")

        async with get_session(tenant_engine) as session:
            with pytest.raises(NotFoundError) as exc_info:
                await SettingsService.for_session(session).get_setting("currency")

        assert exc_info.value.code == "SETTING_NOT_FOUND"
