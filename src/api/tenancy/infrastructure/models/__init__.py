"""SQLAlchemy models for the Tenancy bounded context."""

from tenancy.infrastructure.models.tenant import TenantModel
from tenancy.infrastructure.models.tenant_identity import (
    IDENTITY_TABLE_NAME,
    TenantIdentityModel,
)

__all__ = ["IDENTITY_TABLE_NAME", "TenantIdentityModel", "TenantModel"]
