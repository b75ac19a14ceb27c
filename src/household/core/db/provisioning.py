"""Tenant database provisioning.

The registry depends on a three-operation contract: create a database, delete
it, and open a connection to it by URL. ``ApiDatabaseProvisioner`` implements it
against a hosted database platform API; ``LocalDatabaseProvisioner`` keeps SQLite
files on disk for development and tests.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from src.household.core.config import Settings
from src.household.core.db.engine import create_database_engine
from src.household.core.exceptions import ProvisioningError
from src.household.core.logging import get_logger
from src.household.core.security import validate_database_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class DatabaseInfo:
    name: str
    hostname: str
    url: str


class DatabaseProvisioner(Protocol):
    async def create_database(self, name: str, region: str) -> DatabaseInfo: ...

    async def delete_database(self, name: str) -> None: ...

    def get_connection(self, url: str) -> AsyncEngine: ...

    async def aclose(self) -> None: ...


class ApiDatabaseProvisioner:
    """Provisions tenant databases through the platform's HTTP API.

    Transport errors and 5xx responses are retried with linear backoff.
    4xx responses fail immediately. Cancellation is never retried: tenacity
    only retries the listed exception types, so ``CancelledError`` from the
    request or the backoff sleep propagates as-is.
    """

    def __init__(
        self,
        base_url: str,
        organization: str,
        api_token: str,
        url_template: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.organization = organization
        self.url_template = url_template
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "ApiDatabaseProvisioner":
        # Settings validation guarantees these when DATABASE_PROVISIONER=api
        if not (
            settings.provisioner_api_token
            and settings.provisioner_organization
            and settings.tenant_database_url_template
        ):
            raise ValueError("incomplete settings for DATABASE_PROVISIONER=api")
        return cls(
            settings.provisioner_api_url,
            settings.provisioner_organization,
            settings.provisioner_api_token,
            settings.tenant_database_url_template,
            timeout=settings.provisioner_timeout_seconds,
            max_retries=settings.provisioner_max_retries,
            retry_backoff=settings.provisioner_retry_backoff_seconds,
            transport=transport,
        )

    async def create_database(self, name: str, region: str) -> DatabaseInfo:
        validate_database_name(name)
        logger.info("Creating tenant database", database=name, region=region)

        response = await self._request(
            "POST",
            f"/organizations/{self.organization}/databases",
            json={"name": name, "location": region},
        )
        try:
            database = response.json()["database"]
            hostname = database["Hostname"]
        except (ValueError, KeyError, TypeError) as e:
            raise ProvisioningError(f"unexpected create response for database {name}") from e

        info = DatabaseInfo(
            name=database.get("Name", name),
            hostname=hostname,
            url=self.url_template.format(hostname=hostname, name=name),
        )
        logger.info("Tenant database created", database=name, hostname=hostname)
        return info

    async def delete_database(self, name: str) -> None:
        validate_database_name(name)
        logger.info("Deleting tenant database", database=name)
        await self._request(
            "DELETE",
            f"/organizations/{self.organization}/databases/{name}",
            allow_not_found=True,
        )
        logger.info("Tenant database deleted", database=name)

    def get_connection(self, url: str) -> AsyncEngine:
        return create_database_engine(url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_incrementing(start=self.retry_backoff, increment=self.retry_backoff),
            retry=retry_if_exception_type((httpx.TransportError, _ServerError)),
            before_sleep=_log_retry,
        )
        try:
            return await retrying(self._send, method, path, json, allow_not_found)
        except RetryError as e:
            raise ProvisioningError(
                f"{method} {path} failed after {self.max_retries} attempts"
            ) from e.last_attempt.exception()

    async def _send(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None,
        allow_not_found: bool,
    ) -> httpx.Response:
        response = await self._client.request(method, path, json=json)
        if response.is_success or (response.status_code == 404 and allow_not_found):
            return response
        if response.status_code >= 500:
            raise _ServerError(f"{method} {path} failed with status {response.status_code}")
        raise ProvisioningError(
            f"{method} {path} rejected with status {response.status_code}: "
            f"{_error_detail(response)}"
        )


class _ServerError(ProvisioningError):
    """A 5xx response. Retried; any other ProvisioningError is final."""


def _log_retry(retry_state: RetryCallState) -> None:
    method, path = retry_state.args[:2]
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Provisioning request failed",
        method=method,
        path=path,
        attempt=retry_state.attempt_number,
        error=str(error),
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return f"{error.get('code', '')} {error.get('message', '')}".strip()
        if error:
            return str(error)
    return response.text[:200]


class LocalDatabaseProvisioner:
    """Keeps each tenant database as a SQLite file in one directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).resolve()

    def _path(self, name: str) -> Path:
        validate_database_name(name)
        return self.directory / f"{name}.db"

    async def create_database(self, name: str, region: str) -> DatabaseInfo:
        path = self._path(name)

        def _create() -> None:
            self.directory.mkdir(parents=True, exist_ok=True)
            # exclusive create: a name collision is a provisioning failure
            path.touch(exist_ok=False)

        try:
            await asyncio.to_thread(_create)
        except FileExistsError as e:
            raise ProvisioningError(f"database {name} already exists") from e
        except OSError as e:
            raise ProvisioningError(f"could not create database {name}: {e}") from e

        logger.info("Tenant database created", database=name, path=str(path))
        return DatabaseInfo(name=name, hostname="localhost", url=f"sqlite+aiosqlite:///{path}")

    async def delete_database(self, name: str) -> None:
        path = self._path(name)

        def _delete() -> None:
            for candidate in (path, path.with_name(f"{path.name}-journal")):
                candidate.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_delete)
        except OSError as e:
            raise ProvisioningError(f"could not delete database {name}: {e}") from e
        logger.info("Tenant database deleted", database=name)

    def get_connection(self, url: str) -> AsyncEngine:
        return create_database_engine(url)

    async def aclose(self) -> None:
        return None


def create_provisioner(settings: Settings) -> DatabaseProvisioner:
    """Build the provisioner selected by DATABASE_PROVISIONER."""
    if settings.database_provisioner == "api":
        return ApiDatabaseProvisioner.from_settings(settings)
    return LocalDatabaseProvisioner(settings.local_tenant_directory)
