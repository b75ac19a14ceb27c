"""Tenant database models.

Note: These tables live in each family's own database. Sessions for them
are bound to the engine resolved by the tenant registry.
"""

from src.household.models.family.budget import Budget
from src.household.models.family.category import Category
from src.household.models.family.expense import Expense
from src.household.models.family.member import FamilyMember
from src.household.models.family.setting import FamilySetting

__all__ = [
    "Budget",
    "Category",
    "Expense",
    "FamilyMember",
    "FamilySetting",
]
