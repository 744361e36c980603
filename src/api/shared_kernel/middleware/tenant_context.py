"""Tenant context value object for a validated tenant.

Framework-agnostic and free of business logic, so any bounded context can
depend on it. Resolution and validation live in ``tenancy``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TenantContext:
    """The tenant a request was routed to.

    Only ever constructed after the tenant database's identity record has
    been validated against the Tenant Directory.

    Attributes:
        tenant_id: The tenant identifier (ULID string)
        database_name: Physical database the request is bound to
    """

    tenant_id: str
    database_name: str
