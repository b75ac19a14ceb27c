"""Versioned SQL migrations tracked in a per-database ``schema_migrations`` ledger.

Two independent sets ship with the package, one for the master database and one
for every family database. Each set has its own version space. Version 0 of each
set bootstraps the ledger table itself and is idempotent.

The highest version recorded in the ledger decides where a run starts, so
re-running is a no-op. Every migration runs in its own transaction together
with its ledger row; a failure rolls both back and stops the run.
"""

import hashlib
import re
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from importlib import resources
from importlib.resources.abc import Traversable

from sqlalchemy import Connection, delete, func, insert, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession
from sqlmodel import col

from src.household.core.logging import get_logger
from src.household.models.base import utc_now
from src.household.models.enums import MigrationKind
from src.household.models.migration import SchemaMigration

logger = get_logger(__name__)

MIGRATION_FILENAME_PATTERN = re.compile(r"^(\d+)_(.+)\.sql$")
DESCRIPTION_PREFIX = "-- Description:"
LEDGER_TABLE = "schema_migrations"
NO_VERSION = -1


def split_statements(sql: str) -> list[str]:
    """Split a migration script into individual statements.

    Full-line ``--`` comments are dropped. Statements are separated by ``;``,
    so migration files must not use semicolons inside literals or bodies.
    """
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    return [part.strip() for part in "\n".join(lines).split(";") if part.strip()]


@dataclass(frozen=True)
class Migration:
    """One versioned migration unit."""

    version: int
    name: str
    filename: str
    sql: str
    description: str | None = None
    checksum: str = field(default="")

    @classmethod
    def from_file(cls, filename: str, sql: str) -> "Migration":
        """Build a migration from an ``NNN_some_name.sql`` file.

        Raises:
            ValueError: If the filename does not carry a numeric version prefix.
        """
        match = MIGRATION_FILENAME_PATTERN.match(filename)
        if match is None:
            raise ValueError(f"Invalid migration filename: {filename}")
        description = None
        for line in sql.splitlines():
            stripped = line.strip()
            if stripped.startswith(DESCRIPTION_PREFIX):
                description = stripped.removeprefix(DESCRIPTION_PREFIX).strip()
                break
        return cls(
            version=int(match.group(1)),
            name=match.group(2).replace("_", " "),
            filename=filename,
            sql=sql,
            description=description,
            checksum=hashlib.sha256(sql.encode()).hexdigest(),
        )

    @property
    def statements(self) -> list[str]:
        return split_statements(self.sql)


@dataclass(frozen=True)
class MigrationStatus:
    kind: MigrationKind
    current_version: int
    applied: list[SchemaMigration]
    pending: list[Migration]

    @property
    def up_to_date(self) -> bool:
        return not self.pending


@dataclass(frozen=True)
class ChecksumMismatch:
    """A migration whose file changed after it was applied."""

    version: int
    filename: str
    expected: str
    recorded: str | None


class MigrationError(Exception):
    """A migration failed and was rolled back, or a migration set is malformed."""

    def __init__(
        self,
        message: str,
        kind: MigrationKind,
        migration: Migration | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.migration = migration

    @classmethod
    def failed(
        cls, kind: MigrationKind, migration: Migration, cause: Exception
    ) -> "MigrationError":
        return cls(
            f"{kind.value} migration {migration.version} ({migration.name}) failed: {cause}",
            kind,
            migration,
        )


def _migration_files(kind: MigrationKind) -> Traversable:
    return resources.files("src.household.core.migrations") / "sql" / kind.value


def load_migrations(
    kind: MigrationKind,
    files: Iterable[Traversable] | None = None,
) -> list[Migration]:
    """Load a migration set, ordered by version.

    Args:
        kind: Which set to load (master or family).
        files: Optional explicit files; defaults to the packaged ``sql/<kind>/`` directory.

    Raises:
        MigrationError: If two files share a version.
    """
    if files is None:
        files = _migration_files(kind).iterdir()

    migrations: dict[int, Migration] = {}
    for entry in files:
        if not entry.is_file() or not entry.name.endswith(".sql"):
            continue
        try:
            migration = Migration.from_file(entry.name, entry.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Skipping migration file with invalid name", filename=entry.name)
            continue
        if migration.version in migrations:
            raise MigrationError(
                f"duplicate {kind.value} migration version {migration.version}: "
                f"{migrations[migration.version].filename} and {migration.filename}",
                kind,
                migration,
            )
        migrations[migration.version] = migration

    return [migrations[version] for version in sorted(migrations)]


def _ledger_exists(connection: Connection) -> bool:
    return inspect(connection).has_table(LEDGER_TABLE)


class MigrationRunner:
    """Applies one migration set to a database."""

    def __init__(
        self,
        kind: MigrationKind,
        migrations: Sequence[Migration] | None = None,
        applied_by: str = "system",
    ):
        self.kind = kind
        self.migrations = list(migrations) if migrations is not None else load_migrations(kind)
        self.applied_by = applied_by

    @property
    def latest_version(self) -> int:
        return self.migrations[-1].version if self.migrations else NO_VERSION

    def validate(self) -> None:
        """Check the set is contiguous from version 0 and has no empty units.

        Raises:
            MigrationError: On the first problem found.
        """
        for expected, migration in enumerate(self.migrations):
            if migration.version != expected:
                raise MigrationError(
                    f"{self.kind.value} migrations must be contiguous from 0: "
                    f"expected version {expected}, found {migration.version}",
                    self.kind,
                    migration,
                )
            if not migration.statements:
                raise MigrationError(
                    f"{self.kind.value} migration {migration.filename} is empty",
                    self.kind,
                    migration,
                )

    async def current_version(self, engine: AsyncEngine) -> int:
        """Highest applied version, or -1 when the ledger does not exist yet."""
        async with engine.connect() as connection:
            if not await connection.run_sync(_ledger_exists):
                return NO_VERSION
            version = await connection.scalar(select(func.max(col(SchemaMigration.version))))
        return NO_VERSION if version is None else int(version)

    async def applied(self, engine: AsyncEngine) -> list[SchemaMigration]:
        async with engine.connect() as connection:
            if not await connection.run_sync(_ledger_exists):
                return []
        async with AsyncSession(engine, expire_on_commit=False) as session:
            result = await session.execute(
                select(SchemaMigration).order_by(col(SchemaMigration.version))
            )
            return list(result.scalars().all())

    async def is_applied(self, engine: AsyncEngine, version: int) -> bool:
        return any(row.version == version for row in await self.applied(engine))

    async def pending(self, engine: AsyncEngine) -> list[Migration]:
        current = await self.current_version(engine)
        return [m for m in self.migrations if m.version > current]

    async def status(self, engine: AsyncEngine) -> MigrationStatus:
        applied = await self.applied(engine)
        current = max((row.version for row in applied), default=NO_VERSION)
        return MigrationStatus(
            kind=self.kind,
            current_version=current,
            applied=applied,
            pending=[m for m in self.migrations if m.version > current],
        )

    async def verify(self, engine: AsyncEngine) -> list[ChecksumMismatch]:
        """Report applied migrations whose files no longer match the ledger checksum."""
        by_version = {m.version: m for m in self.migrations}
        mismatches = []
        for row in await self.applied(engine):
            migration = by_version.get(row.version)
            if migration is None or row.checksum == migration.checksum:
                continue
            mismatches.append(
                ChecksumMismatch(
                    version=row.version,
                    filename=migration.filename,
                    expected=migration.checksum,
                    recorded=row.checksum,
                )
            )
        for mismatch in mismatches:
            logger.warning(
                "Migration checksum mismatch",
                kind=self.kind.value,
                version=mismatch.version,
                filename=mismatch.filename,
            )
        return mismatches

    async def dry_run(self, engine: AsyncEngine) -> list[Migration]:
        """Return the migrations ``run`` would apply, without applying them."""
        self.validate()
        pending = await self.pending(engine)
        for migration in pending:
            logger.info(
                "Would apply migration",
                kind=self.kind.value,
                version=migration.version,
                migration_name=migration.name,
                statements=len(migration.statements),
            )
        return pending

    async def run(self, engine: AsyncEngine) -> int:
        """Apply every pending migration in order.

        Returns:
            The highest applied version after the run.

        Raises:
            MigrationError: If a migration fails. It is rolled back and later
                migrations are not attempted.
        """
        self.validate()
        current = await self.current_version(engine)
        pending = [m for m in self.migrations if m.version > current]
        if not pending:
            logger.debug("Migrations up to date", kind=self.kind.value, version=current)
            return current

        logger.info(
            "Applying migrations",
            kind=self.kind.value,
            from_version=current,
            to_version=pending[-1].version,
            count=len(pending),
        )
        for migration in pending:
            await self._apply(engine, migration)
            current = migration.version
        return current

    async def _apply(self, engine: AsyncEngine, migration: Migration) -> None:
        started = time.perf_counter()
        try:
            async with engine.begin() as connection:
                for statement in migration.statements:
                    await connection.exec_driver_sql(statement)
                execution_time_ms = int((time.perf_counter() - started) * 1000)
                await self._record(connection, migration, execution_time_ms)
        except SQLAlchemyError as e:
            raise MigrationError.failed(self.kind, migration, e) from e

        logger.info(
            "Migration applied",
            kind=self.kind.value,
            version=migration.version,
            migration_name=migration.name,
            execution_time_ms=execution_time_ms,
        )

    async def _record(
        self, connection: AsyncConnection, migration: Migration, execution_time_ms: int
    ) -> None:
        # Replace rather than insert: version 0 writes its own bootstrap row
        await connection.execute(
            delete(SchemaMigration).where(col(SchemaMigration.version) == migration.version)
        )
        await connection.execute(
            insert(SchemaMigration).values(
                version=migration.version,
                name=migration.name,
                filename=migration.filename,
                description=migration.description,
                applied_at=utc_now(),
                checksum=migration.checksum,
                execution_time_ms=execution_time_ms,
                migration_type=self.kind.value,
                applied_by=self.applied_by,
            )
        )
