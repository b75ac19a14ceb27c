"""Shared enums for models."""

from enum import Enum


class MembershipRole(str, Enum):
    """User role within a family."""

    MANAGER = "manager"
    MEMBER = "member"


class MigrationKind(str, Enum):
    """Which schema a migration set targets; each has its own version space."""

    MASTER = "master"
    FAMILY = "family"


class SettingDataType(str, Enum):
    """How a family setting value is interpreted by clients."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    JSON = "json"


class BudgetPeriod(str, Enum):
    """How often a budget's limit resets."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
