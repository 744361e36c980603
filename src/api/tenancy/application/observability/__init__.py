"""Domain probes for the Tenancy application layer."""

from tenancy.application.observability.connection_resolver_probe import (
    ConnectionResolverProbe,
    DefaultConnectionResolverProbe,
    DefaultTenantIdentityValidatorProbe,
    TenantIdentityValidatorProbe,
)
from tenancy.application.observability.tenant_resolution_probe import (
    DefaultTenantResolutionProbe,
    TenantResolutionProbe,
)
from tenancy.application.observability.tenant_service_probe import (
    DefaultIdentityProvisioningProbe,
    DefaultTenantServiceProbe,
    IdentityProvisioningProbe,
    TenantServiceProbe,
)

__all__ = [
    "ConnectionResolverProbe",
    "DefaultConnectionResolverProbe",
    "DefaultIdentityProvisioningProbe",
    "DefaultTenantIdentityValidatorProbe",
    "DefaultTenantResolutionProbe",
    "DefaultTenantServiceProbe",
    "IdentityProvisioningProbe",
    "TenantIdentityValidatorProbe",
    "TenantResolutionProbe",
    "TenantServiceProbe",
]
