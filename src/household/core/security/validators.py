"""Input validators for credentials and tenant database names."""

import re
from typing import Final

MAX_DATABASE_NAME_LENGTH: Final[int] = 64
TENANT_DATABASE_PREFIX: Final[str] = "family-"
TENANT_DATABASE_REGEX: Final[str] = rf"^{TENANT_DATABASE_PREFIX}[a-z0-9]+$"

_TENANT_DATABASE_PATTERN: Final[re.Pattern[str]] = re.compile(TENANT_DATABASE_REGEX)


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace and lowercase an email address."""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Minimal structural check: a normalized email must contain '@'."""
    return "@" in email


def tenant_database_name(family_id: str) -> str:
    """Name of the remote database that holds a family's data.

    E.g., '9f86d081884c7d65...' -> 'family-9f86d081884c7d65...'
    """
    name = f"{TENANT_DATABASE_PREFIX}{family_id.lower()}"
    validate_database_name(name)
    return name


def validate_database_name(name: str) -> None:
    """Validate a tenant database name before it is sent to the provisioning API.

    Names must:
    - Start with 'family-'
    - Contain only lowercase letters and digits after the prefix
    - Not exceed 64 characters

    Raises:
        ValueError: If the name is invalid

    Examples:
        >>> validate_database_name("family-0a1b2c")  # Valid
        >>> validate_database_name("family-../etc")  # Invalid
    """
    if len(name) > MAX_DATABASE_NAME_LENGTH:
        raise ValueError(
            f"Database name exceeds limit: {len(name)} > {MAX_DATABASE_NAME_LENGTH}"
        )

    if not _TENANT_DATABASE_PATTERN.match(name):
        raise ValueError(
            f"Invalid database name format: {name}. "
            "Must be 'family-' followed by lowercase alphanumeric characters."
        )
