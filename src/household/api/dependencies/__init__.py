"""FastAPI dependency injection definitions.

Re-exports all dependencies for convenience.
"""

# Database
from src.household.api.dependencies.db import (
    DBSession,
    Registry,
    TenantDBSession,
    get_db_session,
    get_registry,
    get_tenant_db_session,
)

# Repositories
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

# Services
from src.household.api.dependencies.services import (
    AuthServiceDep,
    BudgetServiceDep,
    CategoryServiceDep,
    ExpenseServiceDep,
    FamilyServiceDep,
    SettingsServiceDep,
    get_auth_service,
    get_budget_service,
    get_category_service,
    get_expense_service,
    get_family_service,
    get_settings_service,
)

__all__ = [
    # Database
    "DBSession",
    "Registry",
    "TenantDBSession",
    "get_db_session",
    "get_registry",
    "get_tenant_db_session",
    # Repositories
    "BudgetRepo",
    "CategoryRepo",
    "ExpenseRepo",
    "FamilyMemberRepo",
    "FamilyRepo",
    "MembershipRepo",
    "SessionRepo",
    "SettingRepo",
    "UserRepo",
    # Services
    "AuthServiceDep",
    "BudgetServiceDep",
    "CategoryServiceDep",
    "ExpenseServiceDep",
    "FamilyServiceDep",
    "SettingsServiceDep",
    "get_auth_service",
    "get_budget_service",
    "get_category_service",
    "get_expense_service",
    "get_family_service",
    "get_settings_service",
]
