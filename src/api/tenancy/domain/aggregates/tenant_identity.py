"""Tenant identity record stored inside each tenant database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TenantIdentity:
    """Tamper-evident marker proving which tenant a database belongs to.

    Written once when the tenant database is provisioned and only ever
    re-read afterwards. ``validation_hash`` is a keyed hash over the other
    identifying fields; see ``tenancy.application.security``.
    """

    tenant_id: str
    database_name: str
    created_at: datetime
    validation_hash: str
    creation_metadata: str | None = None

    def belongs_to(self, tenant_id: str, database_name: str) -> bool:
        return self.tenant_id == tenant_id and self.database_name == database_name
