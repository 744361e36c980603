"""Tenant scope FastAPI dependency.

Resolves the caller's tenant and opens a validated connection to its
database before the route handler runs.

Usage in FastAPI routes:
    @router.get("/example")
    async def example(
        session: Annotated[AsyncSession, Depends(get_tenant_session)],
    ):
        # session talks to the caller's own, already validated database
        ...
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.auth import AuthenticatedPrincipal
from shared_kernel.middleware import TenantContext
from tenancy.application.exceptions import TenantRequiredError
from tenancy.application.services import TenantResolutionService
from tenancy.application.value_objects import TenantScope
from tenancy.dependencies.principal import get_principal
from tenancy.dependencies.tenant import get_tenant_resolution_service


@asynccontextmanager
async def resolve_tenant_scope(
    request: Request,
    principal: AuthenticatedPrincipal | None,
    service: TenantResolutionService,
) -> AsyncIterator[TenantScope | None]:
    """Open the tenant scope for a request and release it afterwards.

    ``request.state.tenant_scope`` is set only once validation has passed
    and is cleared again when the request finishes, so a failed or
    cancelled resolution never leaves a partial scope behind.
    The tenant header, when sent, selects among the caller's tenants.

    Args:
        request: The current request
        principal: The authenticated principal, or None
        service: Resolution service for the request

    Yields:
        The validated TenantScope, or None on exempt paths

    Raises:
        TenantAccessError: If resolution fails
    """
    request.state.tenant_scope = None
    requested_tenant_id = request.headers.get(service.tenant_header_name)
    async with service.open_scope(
        principal, request.url.path, requested_tenant_id
    ) as scope:
        request.state.tenant_scope = scope
        try:
            yield scope
        finally:
            request.state.tenant_scope = None


async def get_tenant_scope(
    request: Request,
    principal: Annotated[AuthenticatedPrincipal | None, Depends(get_principal)],
    service: Annotated[
        TenantResolutionService, Depends(get_tenant_resolution_service)
    ],
) -> AsyncIterator[TenantScope | None]:
    """FastAPI dependency wrapping ``resolve_tenant_scope``."""
    async with resolve_tenant_scope(request, principal, service) as scope:
        yield scope


def _require_scope(scope: TenantScope | None) -> TenantScope:
    if scope is None:
        # Only reachable when a tenant route is registered under an exempt prefix
        raise TenantRequiredError()
    return scope


async def get_tenant_session(
    scope: Annotated[TenantScope | None, Depends(get_tenant_scope)],
) -> AsyncSession:
    """The session bound to the caller's validated tenant database."""
    return _require_scope(scope).session


async def get_tenant_context(
    scope: Annotated[TenantScope | None, Depends(get_tenant_scope)],
) -> TenantContext:
    """The validated tenant context for the current request."""
    return _require_scope(scope).context
