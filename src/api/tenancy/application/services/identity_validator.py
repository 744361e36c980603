"""Tenant Identity Validator.

Opens a tenant database and proves, through its identity record, that the
database belongs to the tenant the caller was resolved to. Unreachable
databases are retried a bounded number of times; every other failure is
terminal.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AsyncExitStack, asynccontextmanager

from tenancy.application.config import TenantRoutingConfig
from tenancy.application.observability import (
    DefaultTenantIdentityValidatorProbe,
    TenantIdentityValidatorProbe,
)
from tenancy.application.security import verify_validation_hash
from tenancy.domain.aggregates import TenantIdentity
from tenancy.domain.value_objects import ConnectionTarget
from tenancy.ports.exceptions import (
    HashMismatchError,
    IdentityRecordError,
    IdentityTableMissingError,
    TenantDatabaseUnavailableError,
    TenantMismatchError,
)
from tenancy.ports.repositories import ITenantDatabaseGateway, TenantDatabaseHandle


class ConnectionAttemptsExhaustedError(TenantDatabaseUnavailableError):
    """Every allowed connection attempt failed."""

    def __init__(self, database_name: str, attempts: int, last_error: Exception):
        super().__init__(
            f"Tenant database {database_name!r} unreachable after {attempts} attempts"
        )
        self.database_name = database_name
        self.attempts = attempts
        self.last_error = last_error


class TenantIdentityValidator:
    """Validates tenant databases against their identity records."""

    def __init__(
        self,
        gateway: ITenantDatabaseGateway,
        config: TenantRoutingConfig,
        probe: TenantIdentityValidatorProbe | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._gateway = gateway
        self._config = config
        self._probe = probe or DefaultTenantIdentityValidatorProbe()
        self._sleep = sleep

    def check(
        self,
        tenant_id: str,
        database_name: str,
        records: list[TenantIdentity],
    ) -> TenantIdentity:
        """Check identity records read from a tenant database.

        Ownership is checked before the hash, so a database wired to another
        tenant is always reported as a mismatch.

        Returns:
            The single valid identity record

        Raises:
            IdentityRecordError: If there is not exactly one record
            TenantMismatchError: If the record names another tenant or database
            HashMismatchError: If the recomputed hash differs from the stored one
        """
        if len(records) != 1:
            raise IdentityRecordError(
                f"Expected exactly one identity record, found {len(records)}",
                tenant_id=tenant_id,
                database_name=database_name,
            )

        identity = records[0]
        if identity.tenant_id != tenant_id:
            raise TenantMismatchError(
                f"Identity record belongs to tenant {identity.tenant_id}",
                tenant_id=tenant_id,
                database_name=database_name,
            )
        if identity.database_name != database_name:
            raise TenantMismatchError(
                f"Identity record names database {identity.database_name!r}",
                tenant_id=tenant_id,
                database_name=database_name,
            )
        if not verify_validation_hash(identity, self._config.validation_secret):
            raise HashMismatchError(
                "Stored validation hash does not match the recomputed hash",
                tenant_id=tenant_id,
                database_name=database_name,
            )
        return identity

    async def _read_records(
        self, tenant_id: str, handle: TenantDatabaseHandle
    ) -> list[TenantIdentity]:
        try:
            return await handle.read_identity_records()
        except IdentityTableMissingError as e:
            raise IdentityRecordError(
                str(e), tenant_id=tenant_id, database_name=e.database_name
            ) from e

    async def validate(self, tenant_id: str, target: ConnectionTarget) -> TenantIdentity:
        """Validate a tenant database, releasing the connection afterwards.

        Returns:
            The validated identity record

        Raises:
            ConnectionAttemptsExhaustedError: If every connection attempt failed
            TenantIdentityError: If the identity record does not check out
        """
        async with self._validated(tenant_id, target) as (_, identity):
            return identity

    @asynccontextmanager
    async def open_validated(
        self, tenant_id: str, target: ConnectionTarget
    ) -> AsyncIterator[TenantDatabaseHandle]:
        """Open the tenant database and keep it open only if it validates.

        The yielded handle stays open for the body of the ``async with``
        block and is closed when the block exits, however it exits.
        Raises the same errors as ``validate``.
        """
        async with self._validated(tenant_id, target) as (handle, _):
            yield handle

    @asynccontextmanager
    async def _validated(
        self, tenant_id: str, target: ConnectionTarget
    ) -> AsyncIterator[tuple[TenantDatabaseHandle, TenantIdentity]]:
        max_attempts = self._config.max_attempts
        async with AsyncExitStack() as owner:
            for attempt in range(1, max_attempts + 1):
                try:
                    async with AsyncExitStack() as attempt_stack:
                        handle = await attempt_stack.enter_async_context(
                            self._gateway.open(target)
                        )
                        records = await self._read_records(tenant_id, handle)
                        identity = self.check(tenant_id, target.database_name, records)
                        # Validated: hand the open connection to the outer stack
                        owner.push_async_exit(attempt_stack.pop_all())
                except TenantDatabaseUnavailableError as e:
                    self._probe.connection_attempt_failed(
                        database_name=target.database_name,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        error=e,
                    )
                    if attempt == max_attempts:
                        raise ConnectionAttemptsExhaustedError(
                            target.database_name, attempt, e
                        ) from e
                    await self._sleep(self._config.retry_delay(attempt))
                    continue

                self._probe.identity_validated(
                    tenant_id=tenant_id,
                    database_name=target.database_name,
                    attempts=attempt,
                )
                break

            yield handle, identity
