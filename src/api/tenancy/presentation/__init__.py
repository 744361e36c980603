"""HTTP presentation layer for the Tenancy bounded context."""

from fastapi import APIRouter, Depends

from tenancy.dependencies.tenant_scope import get_tenant_scope
from tenancy.presentation.scoped.routes import router as scoped_router
from tenancy.presentation.tenants.routes import router as tenants_router

# Administrative, cross-tenant routes. The prefix is exempt from tenant resolution.
solution_router = APIRouter(prefix="/api/v1/solution")
solution_router.include_router(tenants_router)

# Everything under this router runs inside a validated tenant scope
tenant_router = APIRouter(
    prefix="/api/v1/tenant",
    dependencies=[Depends(get_tenant_scope)],
)
tenant_router.include_router(scoped_router)

__all__ = ["solution_router", "tenant_router"]
