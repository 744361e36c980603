"""HTTP routes for Tenant Directory administration.

Mounted under the solution prefix, which is exempt from tenant resolution:
these routes act across tenants and need only an authenticated principal.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from shared_kernel.auth import AuthenticatedPrincipal
from tenancy.application.exceptions import (
    ServiceUnavailableError,
    TenantNotFoundAccessError,
)
from tenancy.application.services import IdentityProvisioningService, TenantService
from tenancy.dependencies.principal import require_principal
from tenancy.dependencies.tenant import (
    get_identity_provisioning_service,
    get_tenant_service,
)
from tenancy.domain.exceptions import (
    InvalidTenantError,
    TenantDatabaseNameImmutableError,
)
from tenancy.domain.value_objects import TenantId
from tenancy.ports.exceptions import (
    DuplicateDatabaseNameError,
    DuplicateTenantSlugError,
    IdentityAlreadyProvisionedError,
    TenantDatabaseUnavailableError,
    TenantMisconfiguredError,
    TenantNotFoundError,
)
from tenancy.presentation.errors import (
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from tenancy.presentation.tenants.models import (
    CreateTenantRequest,
    TenantIdentityResponse,
    TenantResponse,
    UpdateTenantRequest,
)

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


def _parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise NotFoundError([f"Tenant {tenant_id} not found."]) from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    request: CreateTenantRequest,
    principal: Annotated[AuthenticatedPrincipal, Depends(require_principal)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Create a new tenant.

    Raises:
        ValidationFailedError: 400 if attributes break a tenant rule
        ConflictError: 409 if the slug or database name is taken
    """
    try:
        tenant = await service.create_tenant(
            name=request.name,
            slug=request.slug,
            database_name=request.database_name,
            actor=principal.subject,
            is_active=request.is_active,
            metadata=request.metadata,
        )
    except InvalidTenantError as e:
        raise ValidationFailedError(e.errors) from e
    except DuplicateTenantSlugError as e:
        raise ConflictError(["A tenant with this slug already exists."]) from e
    except DuplicateDatabaseNameError as e:
        raise ConflictError(["This database is already assigned to a tenant."]) from e

    return TenantResponse.from_domain(tenant)


@router.get("")
async def list_tenants(
    _: Annotated[AuthenticatedPrincipal, Depends(require_principal)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    """List all non-deleted tenants ordered by name."""
    tenants = await service.list_tenants()
    return [TenantResponse.from_domain(tenant) for tenant in tenants]


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    _: Annotated[AuthenticatedPrincipal, Depends(require_principal)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get a tenant by id.

    Raises:
        NotFoundError: 404 if the tenant does not exist or is deleted
    """
    tenant = await service.get_tenant(_parse_tenant_id(tenant_id))
    if tenant is None:
        raise NotFoundError([f"Tenant {tenant_id} not found."])
    return TenantResponse.from_domain(tenant)


@router.put("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    request: UpdateTenantRequest,
    principal: Annotated[AuthenticatedPrincipal, Depends(require_principal)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Update a tenant's name, slug, active flag and metadata.

    Raises:
        ValidationFailedError: 400 if attributes are invalid or the database
            name would change
        NotFoundError: 404 if the tenant does not exist
        ConflictError: 409 if the new slug is taken
    """
    try:
        tenant = await service.update_tenant(
            tenant_id=_parse_tenant_id(tenant_id),
            name=request.name,
            slug=request.slug,
            is_active=request.is_active,
            actor=principal.subject,
            metadata=request.metadata,
            database_name=request.database_name,
        )
    except InvalidTenantError as e:
        raise ValidationFailedError(e.errors) from e
    except TenantDatabaseNameImmutableError as e:
        raise ValidationFailedError(
            ["The database name of a tenant cannot be changed."]
        ) from e
    except DuplicateTenantSlugError as e:
        raise ConflictError(["A tenant with this slug already exists."]) from e

    if tenant is None:
        raise NotFoundError([f"Tenant {tenant_id} not found."])
    return TenantResponse.from_domain(tenant)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: str,
    principal: Annotated[AuthenticatedPrincipal, Depends(require_principal)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> Response:
    """Soft-delete a tenant. Its row and database stay in place.

    Raises:
        NotFoundError: 404 if the tenant does not exist or is already deleted
    """
    deleted = await service.delete_tenant(
        _parse_tenant_id(tenant_id), actor=principal.subject
    )
    if not deleted:
        raise NotFoundError([f"Tenant {tenant_id} not found."])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{tenant_id}/identity", status_code=status.HTTP_201_CREATED)
async def provision_tenant_identity(
    tenant_id: str,
    principal: Annotated[AuthenticatedPrincipal, Depends(require_principal)],
    service: Annotated[
        IdentityProvisioningService, Depends(get_identity_provisioning_service)
    ],
) -> TenantIdentityResponse:
    """Write the identity record into the tenant's existing database.

    Raises:
        TenantNotFoundAccessError: 404 if the tenant is unknown, inactive or
            has no database name
        ConflictError: 409 if the database already has an identity record
        ServiceUnavailableError: 503 if the tenant database is unreachable
    """
    try:
        identity = await service.provision(tenant_id, actor=principal.subject)
    except (TenantNotFoundError, TenantMisconfiguredError) as e:
        raise TenantNotFoundAccessError() from e
    except IdentityAlreadyProvisionedError as e:
        raise ConflictError(
            ["The tenant database already has an identity record."]
        ) from e
    except TenantDatabaseUnavailableError as e:
        raise ServiceUnavailableError() from e

    return TenantIdentityResponse.from_domain(identity)
