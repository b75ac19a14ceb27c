"""Migration ledger model - present in the master and every tenant database."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.household.models.base import utc_now


class SchemaMigration(SQLModel, table=True):
    """One applied migration. Version 0 is the ledger's own bootstrap."""

    __tablename__ = "schema_migrations"

    version: int = Field(primary_key=True)
    name: str
    filename: str
    description: str | None = None
    applied_at: datetime | None = Field(default_factory=utc_now)
    checksum: str | None = None
    execution_time_ms: int | None = None
    migration_type: str | None = None
    applied_by: str | None = "system"
