"""Connection Resolver: maps a tenant id to its database connection target."""

from __future__ import annotations

from tenancy.application.config import TenantRoutingConfig
from tenancy.application.observability import (
    ConnectionResolverProbe,
    DefaultConnectionResolverProbe,
)
from tenancy.domain.value_objects import ConnectionTarget, TenantId
from tenancy.ports.exceptions import TenantMisconfiguredError, TenantNotFoundError
from tenancy.ports.repositories import ITenantRepository


class ConnectionResolver:
    """Resolves tenant ids against the Tenant Directory.

    Always reads the directory; nothing is cached between calls.
    """

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        config: TenantRoutingConfig,
        probe: ConnectionResolverProbe | None = None,
    ):
        self._tenant_repository = tenant_repository
        self._config = config
        self._probe = probe or DefaultConnectionResolverProbe()

    async def resolve(self, tenant_id: str) -> ConnectionTarget:
        """Build the connection target for a tenant.

        Args:
            tenant_id: Tenant id taken from the caller's claims

        Returns:
            Connection target for the tenant's isolated database

        Raises:
            TenantNotFoundError: If the id is malformed, unknown, soft-deleted
                or inactive
            TenantMisconfiguredError: If the tenant has no database name
        """
        try:
            parsed_id = TenantId.from_string(tenant_id)
        except ValueError as e:
            # A malformed id can never match a row, so skip the lookup
            raise TenantNotFoundError("malformed tenant id") from e

        tenant = await self._tenant_repository.get_by_id(parsed_id)
        if tenant is None:
            raise TenantNotFoundError("tenant does not exist")
        if not tenant.is_routable:
            raise TenantNotFoundError(
                "tenant is deleted" if tenant.is_deleted else "tenant is inactive"
            )

        database_name = (tenant.database_name or "").strip()
        if not database_name:
            raise TenantMisconfiguredError("tenant has no database name")

        self._probe.connection_target_resolved(
            tenant_id=parsed_id.value, database_name=database_name
        )
        return ConnectionTarget(
            database_name=database_name,
            url=self._config.build_url(database_name),
        )
