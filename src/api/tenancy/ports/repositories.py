"""Repository and gateway protocols (ports) for the Tenancy bounded context."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tenancy.domain.aggregates import Tenant, TenantIdentity
from tenancy.domain.value_objects import ConnectionTarget, TenantId

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregates stored in the Tenant Directory.

    Soft-deleted tenants are invisible to every read method.
    """

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a non-deleted tenant by id.

        Inactive tenants are returned; callers decide whether they are usable.
        """
        ...

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Retrieve a non-deleted tenant by slug."""
        ...

    async def list_all(self) -> list[Tenant]:
        """List all non-deleted tenants ordered by name."""
        ...

    async def save(self, tenant: Tenant, actor: str) -> None:
        """Insert or update a tenant, stamping audit fields from ``actor``.

        Raises:
            DuplicateTenantSlugError: If the slug is taken
            DuplicateDatabaseNameError: If the database name is taken
        """
        ...

    async def soft_delete(self, tenant_id: TenantId, actor: str) -> bool:
        """Flag a tenant as deleted.

        Returns:
            True if a non-deleted tenant was found and flagged
        """
        ...


@runtime_checkable
class TenantDatabaseHandle(Protocol):
    """An open connection to one tenant database.

    Valid only inside the ``ITenantDatabaseGateway.open`` block that
    produced it.
    """

    database_name: str
    session: AsyncSession

    async def read_identity_records(self) -> list[TenantIdentity]:
        """Read every row of the identity table.

        Raises:
            TenantDatabaseUnavailableError: If the database cannot be reached
            IdentityTableMissingError: If the identity table does not exist
        """
        ...

    async def ensure_identity_table(self) -> None:
        """Create the identity table if it does not exist."""
        ...

    async def write_identity(self, identity: TenantIdentity) -> None:
        """Insert the identity record and commit."""
        ...


@runtime_checkable
class ITenantDatabaseGateway(Protocol):
    """Opens short-lived connections to tenant databases."""

    def open(
        self, target: ConnectionTarget
    ) -> AbstractAsyncContextManager[TenantDatabaseHandle]:
        """Connect to the tenant database described by ``target``.

        The connection and everything created for it are released when the
        context exits, whether normally, by exception or by cancellation.

        Raises:
            TenantDatabaseUnavailableError: If the connection cannot be opened
        """
        ...
