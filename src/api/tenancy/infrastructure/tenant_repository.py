"""PostgreSQL implementation of ITenantRepository.

Stores the Tenant Directory in the shared directory database. Rows are
soft-deleted, and every read filters them out.
"""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from tenancy.ports.exceptions import (
    DuplicateDatabaseNameError,
    DuplicateTenantSlugError,
)
from tenancy.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository managing PostgreSQL storage for Tenant aggregates.

    Transactions belong to the caller; writes only flush.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with a directory session.

        Args:
            session: AsyncSession bound to the Tenant Directory
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch a non-deleted tenant by id.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found or deleted
        """
        stmt = select(TenantModel).where(
            TenantModel.id == tenant_id.value,
            TenantModel.is_deleted.is_(False),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Fetch a non-deleted tenant by slug."""
        stmt = select(TenantModel).where(
            TenantModel.slug == slug,
            TenantModel.is_deleted.is_(False),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_all(self) -> list[Tenant]:
        """List non-deleted tenants ordered by name."""
        stmt = (
            select(TenantModel)
            .where(TenantModel.is_deleted.is_(False))
            .order_by(TenantModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def save(self, tenant: Tenant, actor: str) -> None:
        """Insert or update a tenant row.

        Audit columns are stamped from ``actor``; values on the aggregate
        are refreshed from the row afterwards.

        Args:
            tenant: The Tenant aggregate to persist
            actor: Identifier of the acting principal

        Raises:
            DuplicateTenantSlugError: If another tenant uses the slug
            DuplicateDatabaseNameError: If another tenant uses the database name
        """
        await self._check_unique(tenant)

        try:
            stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

            if model is None:
                model = TenantModel(
                    id=tenant.id.value,
                    database_name=tenant.database_name,
                    created_by=actor,
                )
                if tenant.created_at is not None:
                    model.created_at = tenant.created_at
                self._session.add(model)

            model.name = tenant.name
            model.slug = tenant.slug
            model.is_active = tenant.is_active
            model.tenant_metadata = dict(tenant.metadata)
            model.is_deleted = tenant.is_deleted
            model.updated_by = actor

            await self._session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent writer after the pre-check
            message = str(e)
            if "database_name" in message:
                self._probe.duplicate_database_name(tenant.database_name)
                raise DuplicateDatabaseNameError(
                    f"Database '{tenant.database_name}' is already assigned"
                ) from e
            if "slug" in message:
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError(
                    f"Tenant slug '{tenant.slug}' already exists"
                ) from e
            raise

        tenant.created_by = model.created_by
        tenant.updated_by = model.updated_by
        tenant.created_at = model.created_at
        tenant.updated_at = model.updated_at
        self._probe.tenant_saved(tenant.id.value, actor)

    async def soft_delete(self, tenant_id: TenantId, actor: str) -> bool:
        """Flag a tenant as deleted, keeping its row.

        Returns:
            True if a non-deleted tenant was flagged, False otherwise
        """
        stmt = select(TenantModel).where(
            TenantModel.id == tenant_id.value,
            TenantModel.is_deleted.is_(False),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return False

        model.is_deleted = True
        model.updated_by = actor
        await self._session.flush()
        self._probe.tenant_soft_deleted(tenant_id.value, actor)
        return True

    async def _check_unique(self, tenant: Tenant) -> None:
        # Deleted rows still hold their slug and database name
        stmt = select(TenantModel).where(
            TenantModel.id != tenant.id.value,
            or_(
                TenantModel.slug == tenant.slug,
                TenantModel.database_name == tenant.database_name,
            ),
        )
        result = await self._session.execute(stmt)
        for other in result.scalars().all():
            if other.database_name == tenant.database_name:
                self._probe.duplicate_database_name(tenant.database_name)
                raise DuplicateDatabaseNameError(
                    f"Database '{tenant.database_name}' is already assigned"
                )
            if other.slug == tenant.slug:
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError(
                    f"Tenant slug '{tenant.slug}' already exists"
                )

    @staticmethod
    def _to_domain(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            slug=model.slug,
            database_name=model.database_name or "",
            is_active=model.is_active,
            metadata=dict(model.tenant_metadata or {}),
            is_deleted=model.is_deleted,
            created_at=model.created_at,
            updated_at=model.updated_at,
            created_by=model.created_by,
            updated_by=model.updated_by,
        )
