"""Read access to the identity record through a tenant-scoped session.

An example of a downstream repository: it never opens connections itself
and only ever receives the session of an already validated tenant scope.
"""

from __future__ import annotations

from datetime import UTC

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import TenantIdentity
from tenancy.infrastructure.models import TenantIdentityModel


class TenantIdentityRepository:
    """Reads the identity record of the database a session is bound to."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self) -> TenantIdentity | None:
        result = await self._session.execute(select(TenantIdentityModel).limit(1))
        model = result.scalar_one_or_none()
        if model is None:
            return None
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return TenantIdentity(
            tenant_id=model.tenant_id,
            database_name=model.database_name,
            created_at=created_at,
            validation_hash=model.validation_hash,
            creation_metadata=model.creation_metadata or None,
        )
