"""Database utilities - engines, sessions, provisioning and the tenant registry."""

from src.household.core.db.engine import create_database_engine
from src.household.core.db.provisioning import (
    ApiDatabaseProvisioner,
    DatabaseInfo,
    DatabaseProvisioner,
    LocalDatabaseProvisioner,
    create_provisioner,
)
from src.household.core.db.registry import MigrationReport, TenantHandle, TenantRegistry
from src.household.core.db.rwlock import ReadWriteLock
from src.household.core.db.session import get_session

__all__ = [
    # Engine
    "create_database_engine",
    # Session
    "get_session",
    # Provisioning
    "ApiDatabaseProvisioner",
    "DatabaseInfo",
    "DatabaseProvisioner",
    "LocalDatabaseProvisioner",
    "create_provisioner",
    # Registry
    "MigrationReport",
    "ReadWriteLock",
    "TenantHandle",
    "TenantRegistry",
]
