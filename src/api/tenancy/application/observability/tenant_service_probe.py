"""Domain probes for tenant administration.

Covers the Tenant Directory management service and identity provisioning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant application service operations."""

    def tenant_created(self, tenant_id: str, slug: str, database_name: str) -> None:
        """Record that a tenant was created."""
        ...

    def tenant_updated(self, tenant_id: str) -> None:
        """Record that a tenant was updated."""
        ...

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was soft-deleted."""
        ...

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def duplicate_tenant(self, field: str, value: str) -> None:
        """Record that a uniqueness rule rejected a write."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe:
    """Default implementation of TenantServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantServiceProbe(logger=self._logger, context=context)

    def tenant_created(self, tenant_id: str, slug: str, database_name: str) -> None:
        """Record that a tenant was created."""
        self._logger.info(
            "tenant_created",
            tenant_id=tenant_id,
            slug=slug,
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def tenant_updated(self, tenant_id: str) -> None:
        """Record that a tenant was updated."""
        self._logger.info(
            "tenant_updated",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was soft-deleted."""
        self._logger.info(
            "tenant_deleted",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        self._logger.debug(
            "tenants_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant(self, field: str, value: str) -> None:
        """Record that a uniqueness rule rejected a write."""
        self._logger.warning(
            "duplicate_tenant",
            field=field,
            value=value,
            **self._get_context_kwargs(),
        )


class IdentityProvisioningProbe(Protocol):
    """Domain probe for tenant identity provisioning."""

    def identity_provisioned(self, tenant_id: str, database_name: str) -> None:
        """Record that an identity record was written to a tenant database."""
        ...

    def identity_already_provisioned(self, tenant_id: str, database_name: str) -> None:
        """Record that provisioning was refused because a record exists."""
        ...

    def provisioning_failed(self, tenant_id: str, error: Exception) -> None:
        """Record that provisioning could not complete."""
        ...

    def with_context(self, context: ObservationContext) -> IdentityProvisioningProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIdentityProvisioningProbe:
    """Default implementation of IdentityProvisioningProbe using structlog."""

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
    ) -> DefaultIdentityProvisioningProbe:
        """Create a new probe with observation context bound."""
        return DefaultIdentityProvisioningProbe(logger=self._logger, context=context)

    def identity_provisioned(self, tenant_id: str, database_name: str) -> None:
        self._logger.info(
            "tenant_identity_provisioned",
            tenant_id=tenant_id,
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def identity_already_provisioned(self, tenant_id: str, database_name: str) -> None:
        self._logger.warning(
            "tenant_identity_already_provisioned",
            tenant_id=tenant_id,
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def provisioning_failed(self, tenant_id: str, error: Exception) -> None:
        self._logger.error(
            "tenant_identity_provisioning_failed",
            tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
