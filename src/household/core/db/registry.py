"""Tenant database registry.

Maps a family id to a live engine for that family's own database. The Family
row's ``database_url`` and ``schema_version`` are the durable state; the engine
cache here is derived from them and can be rebuilt at any time.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy import delete, text, update
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import col, select

from src.household.core.config import get_settings
from src.household.core.db.provisioning import DatabaseProvisioner
from src.household.core.db.rwlock import ReadWriteLock
from src.household.core.db.session import get_session
from src.household.core.exceptions import ProvisioningError, TenantNotFound
from src.household.core.logging import get_logger
from src.household.core.migrations import Migration, MigrationRunner
from src.household.core.security import tenant_database_name
from src.household.models.base import utc_now
from src.household.models.enums import MigrationKind
from src.household.models.master import Family

logger = get_logger(__name__)

MASTER_TARGET = "master"


@dataclass
class TenantHandle:
    """A freshly provisioned tenant database, not yet recorded on a Family row."""

    family_id: str
    database_name: str
    url: str
    engine: AsyncEngine
    schema_version: int = 0


@dataclass
class MigrationReport:
    master_version: int
    tenant_versions: dict[str, int] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class TenantRegistry:
    """Owns the master engine and the per-family engine cache.

    Cache reads take the shared side of a reader/writer lock; inserting or
    evicting takes the exclusive side. Lookups that miss re-check the cache
    under the exclusive lock before opening an engine, so concurrent resolves
    for one family open it once.
    """

    def __init__(
        self,
        master_engine: AsyncEngine,
        provisioner: DatabaseProvisioner,
        *,
        region: str | None = None,
        master_migrations: Sequence[Migration] | None = None,
        family_migrations: Sequence[Migration] | None = None,
    ):
        self.master_engine = master_engine
        self.provisioner = provisioner
        self.region = region or get_settings().provisioner_region
        self._master_runner = MigrationRunner(MigrationKind.MASTER, master_migrations)
        self._family_runner = MigrationRunner(MigrationKind.FAMILY, family_migrations)
        self._engines: dict[str, AsyncEngine] = {}
        self._lock = ReadWriteLock()

    @property
    def cached_family_ids(self) -> list[str]:
        return list(self._engines)

    async def _cached(self, family_id: str) -> AsyncEngine | None:
        async with self._lock.read():
            return self._engines.get(family_id)

    async def resolve(self, family_id: str) -> AsyncEngine:
        """Return the engine for a family's database, opening it on first use.

        Raises:
            TenantNotFound: If the family does not exist or has no database URL.
        """
        engine = await self._cached(family_id)
        if engine is not None:
            return engine

        # Master lookup happens outside the lock; the write side only guards the map
        async with get_session(self.master_engine) as session:
            result = await session.execute(
                select(Family.database_url).where(col(Family.id) == family_id)
            )
            database_url = result.scalar_one_or_none()

        if not database_url:
            raise TenantNotFound(family_id)

        async with self._lock.write():
            engine = self._engines.get(family_id)
            if engine is None:
                # Engine creation is lazy and does no I/O
                engine = self.provisioner.get_connection(database_url)
                self._engines[family_id] = engine
                logger.debug("Tenant engine opened", family_id=family_id)
            return engine

    async def provision(self, family_id: str, family_name: str) -> TenantHandle:
        """Create, connect and migrate a new database for a family.

        The returned handle is not cached or recorded anywhere yet: the caller
        writes ``url`` and ``schema_version`` in the transaction that creates the
        Family row, then calls ``attach``. If that transaction fails the caller
        must call ``discard``.

        Raises:
            ProvisioningError: If the database could not be created or prepared.
        """
        database_name = tenant_database_name(family_id)
        logger.info(
            "Provisioning tenant database",
            family_id=family_id,
            family_name=family_name,
            database=database_name,
        )

        info = await self.provisioner.create_database(database_name, self.region)
        engine = self.provisioner.get_connection(info.url)
        handle = TenantHandle(
            family_id=family_id,
            database_name=database_name,
            url=info.url,
            engine=engine,
        )

        try:
            handle.schema_version = await self._family_runner.run(engine)
        except asyncio.CancelledError:
            await asyncio.shield(self.discard(handle))
            raise
        except Exception as e:
            await self.discard(handle)
            raise ProvisioningError(
                f"tenant database {database_name} could not be initialized: {e}"
            ) from e

        logger.info(
            "Tenant database provisioned",
            family_id=family_id,
            database=database_name,
            schema_version=handle.schema_version,
        )
        return handle

    async def attach(self, handle: TenantHandle) -> None:
        """Cache the engine of a handle whose Family row has been committed."""
        async with self._lock.write():
            previous = self._engines.get(handle.family_id)
            self._engines[handle.family_id] = handle.engine
        if previous is not None and previous is not handle.engine:
            await previous.dispose()

    async def discard(self, handle: TenantHandle) -> None:
        """Tear down a provisioned database that never got a committed Family row."""
        await handle.engine.dispose()
        try:
            await self.provisioner.delete_database(handle.database_name)
        except ProvisioningError:
            logger.exception(
                "Failed to delete orphaned tenant database",
                family_id=handle.family_id,
                database=handle.database_name,
            )

    async def evict(self, family_id: str) -> None:
        async with self._lock.write():
            engine = self._engines.pop(family_id, None)
        if engine is not None:
            await engine.dispose()

    async def delete(self, family_id: str) -> None:
        """Delete a family's database, then its Family row.

        The master row is only removed after the remote deletion succeeded, so a
        failure never leaves a family pointing at nothing.

        Raises:
            TenantNotFound: If the family does not exist.
            ProvisioningError: If the remote deletion failed; nothing is removed.
        """
        # No master transaction stays open across the remote call
        async with get_session(self.master_engine) as session:
            family = await session.get(Family, family_id)
        if family is None:
            raise TenantNotFound(family_id)

        await self.provisioner.delete_database(tenant_database_name(family_id))
        await self.evict(family_id)

        async with get_session(self.master_engine) as session:
            try:
                await session.execute(delete(Family).where(col(Family.id) == family_id))
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("Tenant deleted", family_id=family_id)

    async def migrate_master(self) -> int:
        return await self._master_runner.run(self.master_engine)

    async def migrate_tenant(self, family_id: str) -> int:
        """Apply pending family migrations to one tenant and record its version."""
        engine = await self.resolve(family_id)
        version = await self._family_runner.run(engine)

        async with get_session(self.master_engine) as session:
            try:
                # schema_version never moves backwards
                await session.execute(
                    update(Family)
                    .where(col(Family.id) == family_id)
                    .where(col(Family.schema_version) < version)
                    .values(schema_version=version, updated_at=utc_now())
                )
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        return version

    async def run_migrations(self) -> MigrationReport:
        """Migrate master, then every family database.

        A failing family is logged and recorded in the report; the others
        still migrate. A master failure raises.
        """
        report = MigrationReport(master_version=await self.migrate_master())

        async with get_session(self.master_engine) as session:
            result = await session.execute(select(Family.id).order_by(col(Family.created_at)))
            family_ids = list(result.scalars().all())

        for family_id in family_ids:
            try:
                report.tenant_versions[family_id] = await self.migrate_tenant(family_id)
            except Exception as e:
                logger.exception("Tenant migration failed", family_id=family_id)
                report.failures[family_id] = str(e)

        logger.info(
            "Migrations complete",
            master_version=report.master_version,
            tenants_migrated=len(report.tenant_versions),
            tenants_failed=len(report.failures),
        )
        return report

    async def health_check(self) -> dict[str, str | None]:
        """Ping master and every cached tenant. Never raises.

        Returns:
            Target name to ``None`` when healthy, or the error text.
        """
        async with self._lock.read():
            targets = [(MASTER_TARGET, self.master_engine)] + [
                (f"family:{family_id}", engine) for family_id, engine in self._engines.items()
            ]

        status: dict[str, str | None] = {}
        for name, engine in targets:
            try:
                async with engine.connect() as connection:
                    await connection.execute(text("SELECT 1"))
                status[name] = None
            except Exception as e:
                logger.warning("Health check failed", target=name, error=str(e))
                status[name] = str(e)
        return status

    async def close(self) -> None:
        """Dispose every tenant engine and the master engine."""
        async with self._lock.write():
            engines = list(self._engines.values())
            self._engines.clear()
        for engine in engines:
            await engine.dispose()
        await self.master_engine.dispose()
        await self.provisioner.aclose()
