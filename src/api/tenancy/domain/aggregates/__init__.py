"""Aggregates for the Tenancy domain."""

from tenancy.domain.aggregates.tenant import Tenant
from tenancy.domain.aggregates.tenant_identity import TenantIdentity

__all__ = ["Tenant", "TenantIdentity"]
