"""Client-facing failure categories for tenant-scoped requests.

Each category carries the HTTP status and the messages a client may see.
Server-side detail stays in the logs; it is never put into ``errors``.
"""

from __future__ import annotations


class TenantAccessError(Exception):
    """Base class for every terminal tenant resolution failure.

    Attributes:
        category: Stable category name clients can branch on
        title: Short human-readable summary
        status_code: HTTP status code
        errors: Client-visible messages
        headers: Extra response headers
    """

    category = "TenantAccessError"
    title = "Tenant access failed"
    status_code = 500
    default_message = "An internal error occurred."

    def __init__(self, errors: list[str] | None = None):
        self.errors = list(errors) if errors else [self.default_message]
        self.headers: dict[str, str] = {}
        super().__init__(self.errors[0])


class UnauthorizedError(TenantAccessError):
    """No authenticated principal on a route that needs one."""

    category = "Unauthorized"
    title = "Unauthorized"
    status_code = 401
    default_message = "Authentication is required."

    def __init__(self, errors: list[str] | None = None):
        super().__init__(errors)
        self.headers = {"WWW-Authenticate": "Bearer"}


class TenantRequiredError(TenantAccessError):
    """Authenticated, but the token carries no usable tenant claim."""

    category = "TenantRequired"
    title = "Tenant required"
    status_code = 400
    default_message = "A tenant claim is required for this route."


class TenantNotFoundAccessError(TenantAccessError):
    """The tenant claim does not resolve to an active, provisioned tenant.

    Deliberately identical for unknown, deleted, inactive and unprovisioned
    tenants.
    """

    category = "TenantNotFound"
    title = "Tenant not found"
    status_code = 404
    default_message = "Tenant not found."


class TenantIntegrityAccessError(TenantAccessError):
    """The tenant database failed identity validation."""

    category = "TenantIntegrityError"
    title = "Internal server error"
    status_code = 500
    default_message = "An internal error occurred."


class ServiceUnavailableError(TenantAccessError):
    """The tenant database stayed unreachable after bounded retries."""

    category = "ServiceUnavailable"
    title = "Service unavailable"
    status_code = 503
    default_message = "The tenant database is temporarily unavailable."

    def __init__(self, errors: list[str] | None = None, retry_after: int = 5):
        super().__init__(errors)
        self.headers = {"Retry-After": str(retry_after)}
