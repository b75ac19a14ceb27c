"""Schema migrations for the master and family databases."""

from src.household.core.migrations.runner import (
    ChecksumMismatch,
    Migration,
    MigrationError,
    MigrationRunner,
    MigrationStatus,
    load_migrations,
    split_statements,
)

__all__ = [
    "ChecksumMismatch",
    "Migration",
    "MigrationError",
    "MigrationRunner",
    "MigrationStatus",
    "load_migrations",
    "split_statements",
]
