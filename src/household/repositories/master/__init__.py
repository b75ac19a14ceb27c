"""Master database repositories."""

from src.household.repositories.master.family import FamilyRepository
from src.household.repositories.master.membership import MembershipRepository
from src.household.repositories.master.session import SessionRepository
from src.household.repositories.master.user import UserRepository

__all__ = [
    "FamilyRepository",
    "MembershipRepository",
    "SessionRepository",
    "UserRepository",
]
