"""Security utilities - crypto and validators.

Re-exports all security-related functions for convenience.
"""

from src.household.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    generate_id,
    generate_session_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.household.core.security.validators import (
    is_valid_email,
    normalize_email,
    tenant_database_name,
    validate_database_name,
)

__all__ = [
    # Crypto
    "DUMMY_PASSWORD_HASH",
    "generate_id",
    "generate_session_token",
    "hash_password",
    "hash_token",
    "verify_password",
    # Validators
    "is_valid_email",
    "normalize_email",
    "tenant_database_name",
    "validate_database_name",
]
