"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.household.api.dependencies.db import DBSession, Registry, TenantDBSession
from src.household.api.dependencies.repositories import (
    BudgetRepo,
    CategoryRepo,
    ExpenseRepo,
    FamilyMemberRepo,
    FamilyRepo,
    MembershipRepo,
    SessionRepo,
    SettingRepo,
    UserRepo,
)
from src.household.services.auth_service import AuthService
from src.household.services.budget_service import BudgetService
from src.household.services.category_service import CategoryService
from src.household.services.expense_service import ExpenseService
from src.household.services.family_service import FamilyService
from src.household.services.settings_service import SettingsService


def get_auth_service(
    user_repo: UserRepo,
    session_repo: SessionRepo,
    membership_repo: MembershipRepo,
    session: DBSession,
) -> AuthService:
    return AuthService(user_repo, session_repo, membership_repo, session)


def get_family_service(
    family_repo: FamilyRepo,
    membership_repo: MembershipRepo,
    user_repo: UserRepo,
    session: DBSession,
    registry: Registry,
) -> FamilyService:
    return FamilyService(family_repo, membership_repo, user_repo, session, registry)


def get_category_service(category_repo: CategoryRepo, session: TenantDBSession) -> CategoryService:
    return CategoryService(category_repo, session)


def get_expense_service(
    expense_repo: ExpenseRepo,
    category_repo: CategoryRepo,
    member_repo: FamilyMemberRepo,
    session: TenantDBSession,
) -> ExpenseService:
    return ExpenseService(expense_repo, category_repo, member_repo, session)


def get_settings_service(setting_repo: SettingRepo, session: TenantDBSession) -> SettingsService:
    return SettingsService(setting_repo, session)


def get_budget_service(
    budget_repo: BudgetRepo, category_repo: CategoryRepo, session: TenantDBSession
) -> BudgetService:
    return BudgetService(budget_repo, category_repo, session)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
FamilyServiceDep = Annotated[FamilyService, Depends(get_family_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
ExpenseServiceDep = Annotated[ExpenseService, Depends(get_expense_service)]
SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
BudgetServiceDep = Annotated[BudgetService, Depends(get_budget_service)]
