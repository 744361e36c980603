"""Domain probe for per-request tenant resolution.

Every terminal resolution failure is reported here exactly once. Client
errors are warnings; integrity failures and unavailable databases are
errors, since they point at infrastructure rather than the caller.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantResolutionProbe(Protocol):
    """Domain probe for tenant resolution."""

    def resolution_skipped(self, path: str) -> None:
        """Record that an exempt route bypassed tenant resolution."""
        ...

    def tenant_resolved(self, tenant_id: str, database_name: str) -> None:
        """Record that a request was bound to a validated tenant database."""
        ...

    def principal_missing(self, path: str) -> None:
        """Record that a tenant route was called without authentication."""
        ...

    def tenant_claim_missing(self, subject: str, path: str) -> None:
        """Record that the principal carries no usable tenant claim."""
        ...

    def tenant_selection_required(
        self, subject: str, claimed_count: int, path: str
    ) -> None:
        """Record that several tenants are claimed and none was selected."""
        ...

    def tenant_selection_rejected(
        self, subject: str, requested_tenant_id: str, path: str
    ) -> None:
        """Record that the selected tenant is not among the principal's claims."""
        ...

    def tenant_selection_overridden(
        self, subject: str, requested_tenant_id: str, path: str
    ) -> None:
        """Record that a superadmin selected a tenant outside its claims."""
        ...

    def tenant_not_found(self, tenant_id: str, reason: str) -> None:
        """Record that the tenant claim did not resolve to a usable tenant."""
        ...

    def tenant_integrity_failed(
        self,
        tenant_id: str,
        database_name: str,
        kind: str,
        detail: str,
    ) -> None:
        """Record that a tenant database failed identity validation."""
        ...

    def tenant_database_unavailable(
        self,
        tenant_id: str,
        database_name: str | None,
        attempts: int,
        error: str,
    ) -> None:
        """Record that the tenant database could not be reached."""
        ...

    def resolution_timed_out(self, tenant_id: str, timeout_seconds: float) -> None:
        """Record that resolution exceeded its time budget."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolutionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolutionProbe:
    """Default implementation of TenantResolutionProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantResolutionProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantResolutionProbe(logger=self._logger, context=context)

    def resolution_skipped(self, path: str) -> None:
        """Record that an exempt route bypassed tenant resolution."""
        self._logger.debug(
            "tenant_resolution_skipped",
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_resolved(self, tenant_id: str, database_name: str) -> None:
        """Record that a request was bound to a validated tenant database."""
        self._logger.info(
            "tenant_resolved",
            tenant_id=tenant_id,
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def principal_missing(self, path: str) -> None:
        """Record that a tenant route was called without authentication."""
        self._logger.warning(
            "tenant_resolution_unauthorized",
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_claim_missing(self, subject: str, path: str) -> None:
        """Record that the principal carries no usable tenant claim."""
        self._logger.warning(
            "tenant_resolution_claim_missing",
            subject=subject,
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_selection_required(
        self, subject: str, claimed_count: int, path: str
    ) -> None:
        self._logger.warning(
            "tenant_resolution_selection_required",
            subject=subject,
            claimed_count=claimed_count,
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_selection_rejected(
        self, subject: str, requested_tenant_id: str, path: str
    ) -> None:
        self._logger.warning(
            "tenant_resolution_selection_rejected",
            subject=subject,
            requested_tenant_id=requested_tenant_id,
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_selection_overridden(
        self, subject: str, requested_tenant_id: str, path: str
    ) -> None:
        """Superadmin selection is audited at info; it is not a failure."""
        self._logger.info(
            "tenant_resolution_override",
            subject=subject,
            requested_tenant_id=requested_tenant_id,
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str, reason: str) -> None:
        """Record that the tenant claim did not resolve to a usable tenant."""
        self._logger.warning(
            "tenant_resolution_not_found",
            requested_tenant_id=tenant_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def tenant_integrity_failed(
        self,
        tenant_id: str,
        database_name: str,
        kind: str,
        detail: str,
    ) -> None:
        """Record that a tenant database failed identity validation."""
        self._logger.error(
            "tenant_resolution_integrity_failed",
            requested_tenant_id=tenant_id,
            database_name=database_name,
            failure_kind=kind,
            detail=detail,
            **self._get_context_kwargs(),
        )

    def tenant_database_unavailable(
        self,
        tenant_id: str,
        database_name: str | None,
        attempts: int,
        error: str,
    ) -> None:
        """Record that the tenant database could not be reached."""
        self._logger.error(
            "tenant_resolution_database_unavailable",
            requested_tenant_id=tenant_id,
            database_name=database_name,
            attempts=attempts,
            error=error,
            **self._get_context_kwargs(),
        )

    def resolution_timed_out(self, tenant_id: str, timeout_seconds: float) -> None:
        """Record that resolution exceeded its time budget."""
        self._logger.error(
            "tenant_resolution_timed_out",
            requested_tenant_id=tenant_id,
            timeout_seconds=timeout_seconds,
            **self._get_context_kwargs(),
        )
