"""Master database models."""

from src.household.models.master.family import Family, FamilyMembership
from src.household.models.master.session import UserSession
from src.household.models.master.user import User

__all__ = [
    "Family",
    "FamilyMembership",
    "User",
    "UserSession",
]
