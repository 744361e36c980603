"""Domain probes for Tenancy infrastructure adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRepositoryProbe(Protocol):
    """Domain probe for Tenant Directory repository operations."""

    def tenant_saved(self, tenant_id: str, actor: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenant_soft_deleted(self, tenant_id: str, actor: str) -> None:
        """Record that a tenant was flagged as deleted."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate slug was detected."""
        ...

    def duplicate_database_name(self, database_name: str) -> None:
        """Record that a duplicate database name was detected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRepositoryProbe:
    """Default implementation of TenantRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_saved(self, tenant_id: str, actor: str) -> None:
        """Record that a tenant was successfully saved."""
        self._logger.debug(
            "tenant_saved",
            tenant_id=tenant_id,
            actor=actor,
            **self._get_context_kwargs(),
        )

    def tenant_soft_deleted(self, tenant_id: str, actor: str) -> None:
        """Record that a tenant was flagged as deleted."""
        self._logger.debug(
            "tenant_soft_deleted",
            tenant_id=tenant_id,
            actor=actor,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate slug was detected."""
        self._logger.warning(
            "duplicate_tenant_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )

    def duplicate_database_name(self, database_name: str) -> None:
        """Record that a duplicate database name was detected."""
        self._logger.warning(
            "duplicate_tenant_database_name",
            database_name=database_name,
            **self._get_context_kwargs(),
        )


class TenantDatabaseGatewayProbe(Protocol):
    """Domain probe for connections to tenant databases."""

    def identity_table_created(self, database_name: str) -> None:
        """Record that the identity table was created in a tenant database."""
        ...

    def identity_written(self, tenant_id: str, database_name: str) -> None:
        """Record that an identity record was written."""
        ...

    def with_context(self, context: ObservationContext) -> TenantDatabaseGatewayProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantDatabaseGatewayProbe:
    """Default implementation of TenantDatabaseGatewayProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantDatabaseGatewayProbe:
        return DefaultTenantDatabaseGatewayProbe(logger=self._logger, context=context)

    def identity_table_created(self, database_name: str) -> None:
        self._logger.info(
            "tenant_identity_table_ensured",
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def identity_written(self, tenant_id: str, database_name: str) -> None:
        self._logger.debug(
            "tenant_identity_written",
            tenant_id=tenant_id,
            database_name=database_name,
            **self._get_context_kwargs(),
        )
