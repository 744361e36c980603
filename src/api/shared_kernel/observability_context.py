"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped and domain-relevant metadata that should be
    included with all instrumentation events.

    Attributes:
        correlation_id: Per-request correlation identifier supplied upstream.
        user_id: Identifier of the principal performing the operation.
        tenant_id: Tenant identifier (if resolved).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(correlation_id="c0ffee", user_id="auth0|42")
        probe = DefaultTenantResolutionProbe().with_context(context)
    """

    correlation_id: str | None = None
    user_id: str | None = None
    tenant_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.correlation_id is not None:
            result["correlation_id"] = self.correlation_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str) -> ObservationContext:
        """Create a new context with the tenant id set."""
        return ObservationContext(
            correlation_id=self.correlation_id,
            user_id=self.user_id,
            tenant_id=tenant_id,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            correlation_id=self.correlation_id,
            user_id=self.user_id,
            tenant_id=self.tenant_id,
            extra={**self.extra, **kwargs},
        )
