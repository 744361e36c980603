"""Tenant application service for the Tenancy bounded context.

Handles Tenant Directory management (create, read, list, update, delete).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.ports.exceptions import (
    DuplicateDatabaseNameError,
    DuplicateTenantSlugError,
)
from tenancy.ports.repositories import ITenantRepository


class TenantService:
    """Application service for tenant management.

    Every write runs in its own directory transaction.
    """

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        session: AsyncSession,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            session: Directory session for transaction management
            probe: Optional domain probe for observability
        """
        self._tenant_repository = tenant_repository
        self._session = session
        self._probe = probe or DefaultTenantServiceProbe()

    async def create_tenant(
        self,
        name: str,
        slug: str,
        database_name: str,
        actor: str,
        is_active: bool = True,
        metadata: dict[str, str] | None = None,
    ) -> Tenant:
        """Create a new tenant.

        Args:
            name: Display name
            slug: Unique URL-safe alias
            database_name: Physical database that will hold the tenant's data
            actor: Identifier of the principal performing the operation
            is_active: Whether the tenant accepts traffic
            metadata: Free-form string attributes

        Returns:
            The created Tenant aggregate

        Raises:
            InvalidTenantError: If attributes break a tenant rule
            DuplicateTenantSlugError: If the slug is taken
            DuplicateDatabaseNameError: If the database name is taken
        """
        tenant = Tenant.create(
            name=name,
            slug=slug,
            database_name=database_name,
            is_active=is_active,
            metadata=metadata,
        )
        async with self._session.begin():
            await self._save(tenant, actor)

        self._probe.tenant_created(
            tenant_id=tenant.id.value,
            slug=tenant.slug,
            database_name=tenant.database_name,
        )
        return tenant

    async def get_tenant(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a non-deleted tenant by id."""
        tenant = await self._tenant_repository.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
        return tenant

    async def list_tenants(self) -> list[Tenant]:
        """List all non-deleted tenants ordered by name."""
        tenants = await self._tenant_repository.list_all()
        self._probe.tenants_listed(count=len(tenants))
        return tenants

    async def update_tenant(
        self,
        tenant_id: TenantId,
        name: str,
        slug: str,
        is_active: bool,
        actor: str,
        metadata: dict[str, str] | None = None,
        database_name: str | None = None,
    ) -> Tenant | None:
        """Update a tenant's mutable attributes.

        Returns:
            The updated tenant, or None if it does not exist

        Raises:
            InvalidTenantError: If attributes break a tenant rule
            TenantDatabaseNameImmutableError: If a different database name is given
            DuplicateTenantSlugError: If the new slug is taken
        """
        async with self._session.begin():
            tenant = await self._tenant_repository.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant_id=tenant_id.value)
                return None

            tenant.update(
                name=name,
                slug=slug,
                is_active=is_active,
                metadata=metadata,
                database_name=database_name,
            )
            await self._save(tenant, actor)

        self._probe.tenant_updated(tenant_id=tenant_id.value)
        return tenant

    async def delete_tenant(self, tenant_id: TenantId, actor: str) -> bool:
        """Soft-delete a tenant.

        Returns:
            True if the tenant existed and was deleted
        """
        async with self._session.begin():
            deleted = await self._tenant_repository.soft_delete(tenant_id, actor)

        if deleted:
            self._probe.tenant_deleted(tenant_id=tenant_id.value)
        else:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
        return deleted

    async def _save(self, tenant: Tenant, actor: str) -> None:
        try:
            await self._tenant_repository.save(tenant, actor)
        except DuplicateTenantSlugError:
            self._probe.duplicate_tenant(field="slug", value=tenant.slug)
            raise
        except DuplicateDatabaseNameError:
            self._probe.duplicate_tenant(
                field="database_name", value=tenant.database_name
            )
            raise
