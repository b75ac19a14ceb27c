"""Model exports.

Import from here: `from src.household.models import User, Family`
"""

# Enums
from src.household.models.enums import (
    BudgetPeriod,
    MembershipRole,
    MigrationKind,
    SettingDataType,
)

# Tenant database models
from src.household.models.family import Budget, Category, Expense, FamilyMember, FamilySetting

# Master database models
from src.household.models.master import Family, FamilyMembership, User, UserSession

# Both databases
from src.household.models.migration import SchemaMigration

__all__ = [
    # Enums
    "BudgetPeriod",
    "MembershipRole",
    "MigrationKind",
    "SettingDataType",
    # Master database models
    "Family",
    "FamilyMembership",
    "User",
    "UserSession",
    # Tenant database models
    "Budget",
    "Category",
    "Expense",
    "FamilyMember",
    "FamilySetting",
    # Both databases
    "SchemaMigration",
]
