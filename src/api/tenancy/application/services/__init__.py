"""Application services for the Tenancy bounded context."""

from tenancy.application.services.connection_resolver import ConnectionResolver
from tenancy.application.services.identity_provisioning_service import (
    IdentityProvisioningService,
)
from tenancy.application.services.identity_validator import (
    ConnectionAttemptsExhaustedError,
    TenantIdentityValidator,
)
from tenancy.application.services.tenant_resolution_service import (
    TenantResolutionService,
)
from tenancy.application.services.tenant_service import TenantService

__all__ = [
    "ConnectionAttemptsExhaustedError",
    "ConnectionResolver",
    "IdentityProvisioningService",
    "TenantIdentityValidator",
    "TenantResolutionService",
    "TenantService",
]
