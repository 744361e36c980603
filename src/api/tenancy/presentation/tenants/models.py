"""Pydantic models for tenant administration requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tenancy.domain.aggregates import Tenant, TenantIdentity


class CreateTenantRequest(BaseModel):
    """Request model for creating a tenant."""

    name: str = Field(..., description="Tenant name", min_length=1, max_length=255)
    slug: str = Field(
        ...,
        description="Unique lowercase alias (letters, digits, hyphens)",
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9-]+$",
    )
    database_name: str = Field(
        ...,
        alias="databaseName",
        description="Physical database for the tenant's data",
        min_length=1,
        max_length=255,
        pattern=r"^[A-Za-z0-9_]+$",
    )
    is_active: bool = Field(default=True, alias="isActive")
    metadata: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class UpdateTenantRequest(BaseModel):
    """Request model for updating a tenant.

    ``databaseName`` may be echoed back but cannot be changed.
    """

    name: str = Field(..., description="Tenant name", min_length=1, max_length=255)
    slug: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[a-z0-9-]+$",
    )
    is_active: bool = Field(..., alias="isActive")
    metadata: dict[str, str] = Field(default_factory=dict)
    database_name: str | None = Field(default=None, alias="databaseName")

    model_config = ConfigDict(populate_by_name=True)


class TenantResponse(BaseModel):
    """Response model for tenant."""

    id: str = Field(..., description="Tenant ID (ULID format)")
    name: str
    slug: str
    database_name: str = Field(..., serialization_alias="databaseName")
    is_active: bool = Field(..., serialization_alias="isActive")
    metadata: dict[str, str]
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")
    created_by: str = Field(default="", serialization_alias="createdBy")
    updated_by: str = Field(default="", serialization_alias="updatedBy")

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response."""
        return cls(
            id=tenant.id.value,
            name=tenant.name,
            slug=tenant.slug,
            database_name=tenant.database_name,
            is_active=tenant.is_active,
            metadata=dict(tenant.metadata),
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
            created_by=tenant.created_by,
            updated_by=tenant.updated_by,
        )


class TenantIdentityResponse(BaseModel):
    """Response model for a tenant database identity record.

    The validation hash is never exposed.
    """

    tenant_id: str = Field(..., serialization_alias="tenantId")
    database_name: str = Field(..., serialization_alias="databaseName")
    created_at: datetime = Field(..., serialization_alias="createdAt")

    @classmethod
    def from_domain(cls, identity: TenantIdentity) -> TenantIdentityResponse:
        return cls(
            tenant_id=identity.tenant_id,
            database_name=identity.database_name,
            created_at=identity.created_at,
        )
