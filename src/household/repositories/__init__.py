"""Repository layer - data access abstraction."""

from src.household.repositories.base import BaseRepository
from src.household.repositories.family import (
    BudgetRepository,
    CategoryRepository,
    ExpenseRepository,
    FamilyMemberRepository,
    FamilySettingRepository,
)
from src.household.repositories.master import (
    FamilyRepository,
    MembershipRepository,
    SessionRepository,
    UserRepository,
)

__all__ = [
    # Base
    "BaseRepository",
    # Master database
    "FamilyRepository",
    "MembershipRepository",
    "SessionRepository",
    "UserRepository",
    # Family databases
    "BudgetRepository",
    "CategoryRepository",
    "ExpenseRepository",
    "FamilyMemberRepository",
    "FamilySettingRepository",
]
