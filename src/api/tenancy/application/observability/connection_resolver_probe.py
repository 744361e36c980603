"""Domain probes for tenant connection resolution and identity validation.

Failures are reported once, by the resolution probe. These probes only
record progress so that a failed request does not produce duplicate
error events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionResolverProbe(Protocol):
    """Domain probe for the Connection Resolver."""

    def connection_target_resolved(self, tenant_id: str, database_name: str) -> None:
        """Record that a tenant id was mapped to its database."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionResolverProbe:
    """Default implementation of ConnectionResolverProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultConnectionResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionResolverProbe(logger=self._logger, context=context)

    def connection_target_resolved(self, tenant_id: str, database_name: str) -> None:
        self._logger.debug(
            "tenant_connection_target_resolved",
            tenant_id=tenant_id,
            database_name=database_name,
            **self._get_context_kwargs(),
        )


class TenantIdentityValidatorProbe(Protocol):
    """Domain probe for the Tenant Identity Validator."""

    def connection_attempt_failed(
        self,
        database_name: str,
        attempt: int,
        max_attempts: int,
        error: Exception,
    ) -> None:
        """Record one failed connection attempt to a tenant database."""
        ...

    def identity_validated(
        self, tenant_id: str, database_name: str, attempts: int
    ) -> None:
        """Record that the identity record of a tenant database checked out."""
        ...

    def with_context(
        self, context: ObservationContext
    ) -> TenantIdentityValidatorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantIdentityValidatorProbe:
    """Default implementation of TenantIdentityValidatorProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantIdentityValidatorProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantIdentityValidatorProbe(logger=self._logger, context=context)

    def connection_attempt_failed(
        self,
        database_name: str,
        attempt: int,
        max_attempts: int,
        error: Exception,
    ) -> None:
        self._logger.debug(
            "tenant_database_connection_attempt_failed",
            database_name=database_name,
            attempt=attempt,
            max_attempts=max_attempts,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def identity_validated(
        self, tenant_id: str, database_name: str, attempts: int
    ) -> None:
        self._logger.debug(
            "tenant_identity_validated",
            tenant_id=tenant_id,
            database_name=database_name,
            attempts=attempts,
            **self._get_context_kwargs(),
        )
