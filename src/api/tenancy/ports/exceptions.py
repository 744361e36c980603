"""Port exceptions for the Tenancy bounded context.

Raised by repositories, the tenant database gateway and the routing
services. The application layer maps them to client-facing categories.
"""

from __future__ import annotations


class TenantNotFoundError(Exception):
    """No active, non-deleted tenant exists for the given id."""


class TenantMisconfiguredError(Exception):
    """The tenant exists but has no database assigned yet."""


class TenantDatabaseUnavailableError(Exception):
    """The tenant database could not be reached.

    The only retryable failure on the resolution path.
    """


class TenantIdentityError(Exception):
    """Base class for identity record validation failures.

    Attributes:
        tenant_id: Tenant the caller was resolved to
        database_name: Database the caller was routed to
        kind: Short machine-readable failure kind for logs
    """

    kind = "identity_error"

    def __init__(self, message: str, tenant_id: str, database_name: str):
        super().__init__(message)
        self.tenant_id = tenant_id
        self.database_name = database_name


class IdentityRecordError(TenantIdentityError):
    """The identity table is missing or does not hold exactly one row."""

    kind = "identity_record"


class TenantMismatchError(TenantIdentityError):
    """The identity record belongs to a different tenant or database."""

    kind = "tenant_mismatch"


class HashMismatchError(TenantIdentityError):
    """The recomputed validation hash differs from the stored one."""

    kind = "hash_mismatch"


class IdentityTableMissingError(Exception):
    """The tenant database has no identity table.

    Raised by the gateway, which does not know which tenant the caller
    expects; the validator reports it as an IdentityRecordError.
    """

    def __init__(self, database_name: str):
        super().__init__(f"Identity table is missing in {database_name!r}")
        self.database_name = database_name


class IdentityAlreadyProvisionedError(Exception):
    """The tenant database already holds an identity record."""


class DuplicateTenantSlugError(Exception):
    """Another tenant already uses this slug."""


class DuplicateDatabaseNameError(Exception):
    """Another tenant is already bound to this database name."""
