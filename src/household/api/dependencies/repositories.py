"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.household.api.dependencies.db import DBSession, TenantDBSession
from src.household.repositories import (
    BudgetRepository,
    CategoryRepository,
    ExpenseRepository,
    FamilyMemberRepository,
    FamilyRepository,
    FamilySettingRepository,
    MembershipRepository,
    SessionRepository,
    UserRepository,
)

# Master database


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_session_repository(session: DBSession) -> SessionRepository:
    return SessionRepository(session)


def get_membership_repository(session: DBSession) -> MembershipRepository:
    return MembershipRepository(session)


def get_family_repository(session: DBSession) -> FamilyRepository:
    return FamilyRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
SessionRepo = Annotated[SessionRepository, Depends(get_session_repository)]
MembershipRepo = Annotated[MembershipRepository, Depends(get_membership_repository)]
FamilyRepo = Annotated[FamilyRepository, Depends(get_family_repository)]

# Family databases


def get_category_repository(session: TenantDBSession) -> CategoryRepository:
    return CategoryRepository(session)


def get_expense_repository(session: TenantDBSession) -> ExpenseRepository:
    return ExpenseRepository(session)


def get_family_member_repository(session: TenantDBSession) -> FamilyMemberRepository:
    return FamilyMemberRepository(session)


def get_setting_repository(session: TenantDBSession) -> FamilySettingRepository:
    return FamilySettingRepository(session)


def get_budget_repository(session: TenantDBSession) -> BudgetRepository:
    return BudgetRepository(session)


CategoryRepo = Annotated[CategoryRepository, Depends(get_category_repository)]
ExpenseRepo = Annotated[ExpenseRepository, Depends(get_expense_repository)]
FamilyMemberRepo = Annotated[FamilyMemberRepository, Depends(get_family_member_repository)]
SettingRepo = Annotated[FamilySettingRepository, Depends(get_setting_repository)]
BudgetRepo = Annotated[BudgetRepository, Depends(get_budget_repository)]
