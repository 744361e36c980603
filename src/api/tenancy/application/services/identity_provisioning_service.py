"""Identity provisioning for tenant databases.

Writes the one identity record a tenant database carries for its whole
life. The request path only ever reads it back.
"""

from __future__ import annotations

from datetime import UTC, datetime

from tenancy.application.config import TenantRoutingConfig
from tenancy.application.observability import (
    DefaultIdentityProvisioningProbe,
    IdentityProvisioningProbe,
)
from tenancy.application.security import compute_validation_hash, format_created_at
from tenancy.application.services.connection_resolver import ConnectionResolver
from tenancy.domain.aggregates import TenantIdentity
from tenancy.ports.exceptions import IdentityAlreadyProvisionedError
from tenancy.ports.repositories import ITenantDatabaseGateway


class IdentityProvisioningService:
    """Creates the identity record inside a tenant's database."""

    def __init__(
        self,
        resolver: ConnectionResolver,
        gateway: ITenantDatabaseGateway,
        config: TenantRoutingConfig,
        probe: IdentityProvisioningProbe | None = None,
    ):
        self._resolver = resolver
        self._gateway = gateway
        self._config = config
        self._probe = probe or DefaultIdentityProvisioningProbe()

    async def provision(self, tenant_id: str, actor: str) -> TenantIdentity:
        """Write the identity record for a tenant's database.

        The database itself must already exist; only the identity table and
        its row are created here.

        Args:
            tenant_id: Tenant whose database is provisioned
            actor: Identifier of the principal performing the operation

        Returns:
            The identity record that was written

        Raises:
            TenantNotFoundError: If the tenant is unknown, deleted or inactive
            TenantMisconfiguredError: If the tenant has no database name
            TenantDatabaseUnavailableError: If the tenant database is unreachable
            IdentityAlreadyProvisionedError: If the database already has a record
        """
        target = await self._resolver.resolve(tenant_id)

        try:
            async with self._gateway.open(target) as handle:
                await handle.ensure_identity_table()
                if await handle.read_identity_records():
                    self._probe.identity_already_provisioned(
                        tenant_id=tenant_id, database_name=target.database_name
                    )
                    raise IdentityAlreadyProvisionedError(
                        f"Database {target.database_name!r} already has an identity record"
                    )

                created_at = datetime.now(UTC)
                identity = TenantIdentity(
                    tenant_id=tenant_id,
                    database_name=target.database_name,
                    created_at=created_at,
                    validation_hash=compute_validation_hash(
                        tenant_id,
                        target.database_name,
                        created_at,
                        self._config.validation_secret,
                    ),
                    creation_metadata=(
                        f"Provisioned by {actor} at {format_created_at(created_at)}"
                    ),
                )
                await handle.write_identity(identity)
        except IdentityAlreadyProvisionedError:
            raise
        except Exception as e:
            self._probe.provisioning_failed(tenant_id=tenant_id, error=e)
            raise

        self._probe.identity_provisioned(
            tenant_id=tenant_id, database_name=target.database_name
        )
        return identity
