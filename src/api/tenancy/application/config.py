"""Immutable routing configuration for tenant resolution."""

from __future__ import annotations

from dataclasses import dataclass, field

DATABASE_NAME_PLACEHOLDER = "{DatabaseName}"


@dataclass(frozen=True)
class TenantRoutingConfig:
    """Everything the resolver and validator need, fixed at construction.

    Built once from settings and passed into services so that no routing
    component reads ambient configuration.

    Attributes:
        connection_template: Tenant database URL with a ``{DatabaseName}`` placeholder
        validation_secret: Secret mixed into identity validation hashes
        max_attempts: Connection attempts per request before giving up
        retry_base_delay: Delay after the first failed attempt, in seconds
        retry_max_delay: Upper bound for the exponential backoff delay
        resolution_timeout: Budget for the whole resolution sequence, in seconds
        exempt_path_prefixes: Paths that skip tenant resolution
        tenant_claim_name: Canonical tenant claim name
        claim_namespaces: Accepted namespaces for URL-namespaced claims
        tenant_header_name: Request header selecting one of several claimed tenants
        superadmin_role: Role allowed to select any tenant through that header
    """

    connection_template: str = field(repr=False)
    validation_secret: str = field(repr=False)
    max_attempts: int = 3
    retry_base_delay: float = 0.1
    retry_max_delay: float = 2.0
    resolution_timeout: float = 10.0
    exempt_path_prefixes: tuple[str, ...] = ()
    tenant_claim_name: str = "tenant_id"
    claim_namespaces: tuple[str, ...] = ()
    tenant_header_name: str = "X-Tenant-Id"
    superadmin_role: str = "superadmin"

    def __post_init__(self) -> None:
        if self.connection_template.count(DATABASE_NAME_PLACEHOLDER) != 1:
            raise ValueError(
                f"connection_template must contain {DATABASE_NAME_PLACEHOLDER} exactly once"
            )
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def build_url(self, database_name: str) -> str:
        """Substitute ``database_name`` into the connection template."""
        return self.connection_template.replace(
            DATABASE_NAME_PLACEHOLDER, database_name
        )

    def retry_delay(self, attempt: int) -> float:
        """Backoff delay after failed attempt number ``attempt`` (1-based)."""
        return min(self.retry_base_delay * 2 ** (attempt - 1), self.retry_max_delay)

    def is_exempt(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.exempt_path_prefixes)
