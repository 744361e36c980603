"""Dependency injection for tenancy services."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.correlation import get_correlation_id
from infrastructure.database.dependencies import get_directory_session
from infrastructure.settings import get_database_settings, get_tenancy_settings
from shared_kernel.auth import AuthenticatedPrincipal
from shared_kernel.observability_context import ObservationContext
from tenancy.application.config import TenantRoutingConfig
from tenancy.application.observability import (
    DefaultConnectionResolverProbe,
    DefaultIdentityProvisioningProbe,
    DefaultTenantIdentityValidatorProbe,
    DefaultTenantResolutionProbe,
    DefaultTenantServiceProbe,
)
from tenancy.application.services import (
    ConnectionResolver,
    IdentityProvisioningService,
    TenantIdentityValidator,
    TenantResolutionService,
    TenantService,
)
from tenancy.dependencies.principal import get_principal
from tenancy.infrastructure.tenant_database_gateway import (
    SqlAlchemyTenantDatabaseGateway,
)
from tenancy.infrastructure.tenant_repository import TenantRepository


@lru_cache
def get_routing_config() -> TenantRoutingConfig:
    """Build the immutable routing configuration from tenancy settings."""
    settings = get_tenancy_settings()
    return TenantRoutingConfig(
        connection_template=settings.connection_template.get_secret_value(),
        validation_secret=settings.validation_secret.get_secret_value(),
        max_attempts=settings.connection_max_attempts,
        retry_base_delay=settings.connection_retry_base_delay_seconds,
        retry_max_delay=settings.connection_retry_max_delay_seconds,
        resolution_timeout=settings.resolution_timeout_seconds,
        exempt_path_prefixes=tuple(settings.exempt_path_prefixes),
        tenant_claim_name=settings.tenant_claim_name,
        claim_namespaces=tuple(settings.claim_namespaces),
        tenant_header_name=settings.tenant_header_name,
        superadmin_role=settings.superadmin_role,
    )


@lru_cache
def get_tenant_database_gateway() -> SqlAlchemyTenantDatabaseGateway:
    """Get the tenant database gateway (stateless, shared)."""
    return SqlAlchemyTenantDatabaseGateway(echo=get_database_settings().echo)


def get_observation_context(
    request: Request,
    principal: Annotated[AuthenticatedPrincipal | None, Depends(get_principal)],
) -> ObservationContext:
    """Request-scoped metadata bound into every probe."""
    return ObservationContext(
        correlation_id=get_correlation_id(request),
        user_id=principal.subject if principal else None,
    )


def get_tenant_repository(
    session: Annotated[AsyncSession, Depends(get_directory_session)],
) -> TenantRepository:
    """Get TenantRepository bound to the request's directory session."""
    return TenantRepository(session=session)


def get_connection_resolver(
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
    config: Annotated[TenantRoutingConfig, Depends(get_routing_config)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> ConnectionResolver:
    return ConnectionResolver(
        tenant_repository=tenant_repository,
        config=config,
        probe=DefaultConnectionResolverProbe().with_context(context),
    )


def get_identity_validator(
    gateway: Annotated[
        SqlAlchemyTenantDatabaseGateway, Depends(get_tenant_database_gateway)
    ],
    config: Annotated[TenantRoutingConfig, Depends(get_routing_config)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> TenantIdentityValidator:
    return TenantIdentityValidator(
        gateway=gateway,
        config=config,
        probe=DefaultTenantIdentityValidatorProbe().with_context(context),
    )


def get_tenant_resolution_service(
    resolver: Annotated[ConnectionResolver, Depends(get_connection_resolver)],
    validator: Annotated[TenantIdentityValidator, Depends(get_identity_validator)],
    config: Annotated[TenantRoutingConfig, Depends(get_routing_config)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> TenantResolutionService:
    """Get TenantResolutionService wired for the current request."""
    return TenantResolutionService(
        resolver=resolver,
        validator=validator,
        config=config,
        probe=DefaultTenantResolutionProbe().with_context(context),
    )


def get_tenant_service(
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
    session: Annotated[AsyncSession, Depends(get_directory_session)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> TenantService:
    """Get TenantService instance.

    The repository and the service share one directory session through
    FastAPI's per-request dependency caching.
    """
    return TenantService(
        tenant_repository=tenant_repository,
        session=session,
        probe=DefaultTenantServiceProbe().with_context(context),
    )


def get_identity_provisioning_service(
    resolver: Annotated[ConnectionResolver, Depends(get_connection_resolver)],
    gateway: Annotated[
        SqlAlchemyTenantDatabaseGateway, Depends(get_tenant_database_gateway)
    ],
    config: Annotated[TenantRoutingConfig, Depends(get_routing_config)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> IdentityProvisioningService:
    return IdentityProvisioningService(
        resolver=resolver,
        gateway=gateway,
        config=config,
        probe=DefaultIdentityProvisioningProbe().with_context(context),
    )
