"""Value objects for the Tenancy domain."""

from __future__ import annotations

from dataclasses import dataclass, field

from ulid import ULID


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Args:
            value: ULID string

        Returns:
            TenantId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class ConnectionTarget:
    """Where a tenant's isolated database lives.

    The URL carries credentials, so it is excluded from ``repr`` and must
    never be logged. Use ``database_name`` in diagnostics instead.
    """

    database_name: str
    url: str = field(repr=False)
