"""Database engine creation for the master and tenant databases."""

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from src.household.core.config import get_settings


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """Make SQLite honour foreign keys and transactional DDL.

    pysqlite only opens a transaction before DML, so CREATE/ALTER would
    otherwise commit on their own and a failed migration could not roll back.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(connection: Any) -> None:
        connection.exec_driver_sql("BEGIN")


def create_database_engine(url: str) -> AsyncEngine:
    """Create an async engine for a master or tenant database URL.

    SQLite URLs (development and tests) get a NullPool and explicit transaction
    handling; server databases get the configured pool.
    """
    settings = get_settings()
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        engine = create_async_engine(url, poolclass=NullPool)
        _enable_sqlite_transactions(engine)
        return engine

    return create_async_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
    )
