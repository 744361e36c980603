"""Observability for Tenancy infrastructure adapters."""

from tenancy.infrastructure.observability.repository_probe import (
    DefaultTenantDatabaseGatewayProbe,
    DefaultTenantRepositoryProbe,
    TenantDatabaseGatewayProbe,
    TenantRepositoryProbe,
)

__all__ = [
    "DefaultTenantDatabaseGatewayProbe",
    "DefaultTenantRepositoryProbe",
    "TenantDatabaseGatewayProbe",
    "TenantRepositoryProbe",
]
