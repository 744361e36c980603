"""Routes that run inside a validated tenant scope."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.middleware import TenantContext
from tenancy.dependencies.tenant_scope import get_tenant_context, get_tenant_session
from tenancy.infrastructure.tenant_identity_repository import TenantIdentityRepository
from tenancy.presentation.errors import NotFoundError
from tenancy.presentation.tenants.models import TenantIdentityResponse

router = APIRouter(tags=["tenant"])


@router.get("/identity")
async def get_current_tenant_identity(
    context: Annotated[TenantContext, Depends(get_tenant_context)],
    session: Annotated[AsyncSession, Depends(get_tenant_session)],
) -> TenantIdentityResponse:
    """Describe the tenant database the caller was routed to.

    Reads through the tenant-scoped session, so the answer always comes
    from the caller's own database.
    """
    identity = await TenantIdentityRepository(session).get()
    if identity is None:
        raise NotFoundError([f"No identity record for tenant {context.tenant_id}."])
    return TenantIdentityResponse.from_domain(identity)
