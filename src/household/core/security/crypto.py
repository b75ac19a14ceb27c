"""Cryptographic utilities - password hashing, identifiers and session tokens."""

import base64
import secrets
from hashlib import sha256

import argon2

from src.household.core.config import get_settings

# 128-bit identifiers for users and sessions
ID_BYTES = 16
# 256-bit opaque session tokens
SESSION_TOKEN_BYTES = 32


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash. Returns False on any error."""
    try:
        return _password_hasher.verify(hashed, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.VerificationError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


# Verified against when the user does not exist, so unknown emails cost a full verify
DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def generate_id() -> str:
    """Generate a random 128-bit hex identifier."""
    return secrets.token_hex(ID_BYTES)


def generate_session_token() -> str:
    """Generate an opaque session token: 32 random bytes, base64url without padding."""
    raw = secrets.token_bytes(SESSION_TOKEN_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def hash_token(token: str) -> str:
    """Hash a session token for storage. Only the digest is ever persisted."""
    return sha256(token.encode()).hexdigest()
