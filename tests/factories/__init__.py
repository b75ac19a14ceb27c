"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import UserFactory, UserSessionFactory, ...
"""

from tests.factories.base import BaseFactory, generate_id, utc_now
from tests.factories.family import FamilyMemberFactory
from tests.factories.user import DEFAULT_TEST_PASSWORD, UserFactory, UserSessionFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_id",
    "utc_now",
    # User
    "DEFAULT_TEST_PASSWORD",
    "UserFactory",
    "UserSessionFactory",
    # Family database
    "FamilyMemberFactory",
]
