"""Validation hash for tenant identity records.

The hash binds a tenant database to one tenant. It is a SHA-256 digest over
the identifying fields and a server-side secret, base64 encoded:

    base64(sha256("{tenant_id}|{database_name}|{created_at}|{secret}"))

``created_at`` is rendered as ISO-8601 UTC with microseconds and a ``Z``
suffix so the same instant always produces the same text. Timestamps read
back without tzinfo are taken to be UTC.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import UTC, datetime

from tenancy.domain.aggregates import TenantIdentity


def format_created_at(created_at: datetime) -> str:
    """Render a timestamp in the canonical form used by the hash."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def compute_validation_hash(
    tenant_id: str,
    database_name: str,
    created_at: datetime,
    secret: str,
) -> str:
    """Compute the validation hash for an identity record.

    Args:
        tenant_id: Owning tenant id
        database_name: Physical database name
        created_at: Provisioning timestamp
        secret: Server-side validation secret

    Returns:
        Base64-encoded SHA-256 digest
    """
    payload = "|".join(
        (tenant_id, database_name, format_created_at(created_at), secret)
    )
    digest = hashlib.sha256(payload.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_validation_hash(identity: TenantIdentity, secret: str) -> bool:
    """Recompute the hash of ``identity`` and compare in constant time."""
    expected = compute_validation_hash(
        identity.tenant_id,
        identity.database_name,
        identity.created_at,
        secret,
    )
    return hmac.compare_digest(
        expected.encode("ascii"), identity.validation_hash.encode("utf-8")
    )
