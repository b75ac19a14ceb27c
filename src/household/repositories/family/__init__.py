"""Tenant database repositories."""

from src.household.repositories.family.budget import BudgetRepository
from src.household.repositories.family.category import CategoryRepository
from src.household.repositories.family.expense import ExpenseRepository
from src.household.repositories.family.member import FamilyMemberRepository
from src.household.repositories.family.setting import FamilySettingRepository

__all__ = [
    "BudgetRepository",
    "CategoryRepository",
    "ExpenseRepository",
    "FamilyMemberRepository",
    "FamilySettingRepository",
]
