"""Per-request tenant resolution.

Runs Extract, Resolve and Validate strictly in that order and either hands
back a validated tenant scope or raises exactly one client-facing
``TenantAccessError``. Nothing is retried here beyond the validator's
bounded connection retries, and there is no fallback tenant.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from shared_kernel.auth import (
    AuthenticatedPrincipal,
    collect_claim_values,
    normalize_claims,
)
from shared_kernel.middleware import TenantContext
from tenancy.application.config import TenantRoutingConfig
from tenancy.application.exceptions import (
    ServiceUnavailableError,
    TenantIntegrityAccessError,
    TenantNotFoundAccessError,
    TenantRequiredError,
    UnauthorizedError,
)
from tenancy.application.observability import (
    DefaultTenantResolutionProbe,
    TenantResolutionProbe,
)
from tenancy.application.services.connection_resolver import ConnectionResolver
from tenancy.application.services.identity_validator import (
    ConnectionAttemptsExhaustedError,
    TenantIdentityValidator,
)
from tenancy.application.value_objects import TenantScope
from tenancy.domain.value_objects import ConnectionTarget
from tenancy.ports.exceptions import (
    TenantDatabaseUnavailableError,
    TenantIdentityError,
    TenantMisconfiguredError,
    TenantNotFoundError,
)
from tenancy.ports.repositories import TenantDatabaseHandle


class TenantResolutionService:
    """Binds a request to its caller's validated tenant database."""

    def __init__(
        self,
        resolver: ConnectionResolver,
        validator: TenantIdentityValidator,
        config: TenantRoutingConfig,
        probe: TenantResolutionProbe | None = None,
    ):
        self._resolver = resolver
        self._validator = validator
        self._config = config
        self._probe = probe or DefaultTenantResolutionProbe()

    @property
    def tenant_header_name(self) -> str:
        return self._config.tenant_header_name

    def extract_tenant_id(
        self,
        principal: AuthenticatedPrincipal | None,
        path: str,
        requested_tenant_id: str | None = None,
    ) -> str:
        """Pick the tenant id for this request from the principal's claims.

        A principal with one tenant claim gets that tenant. A principal with
        several must select one with the tenant header, and the selection
        must be among its claims. Holders of the superadmin role may select
        any tenant.

        Args:
            principal: The authenticated caller, if any
            path: Request path, for logging
            requested_tenant_id: Value of the tenant header, if sent

        Raises:
            UnauthorizedError: If there is no authenticated principal
            TenantRequiredError: If no tenant claim is present, or several
                are present and none was selected
            TenantNotFoundAccessError: If the selected tenant is not claimed
        """
        if principal is None:
            self._probe.principal_missing(path=path)
            raise UnauthorizedError()

        requested = (requested_tenant_id or "").strip() or None
        subject = principal.subject

        if requested is not None and principal.has_role(self._config.superadmin_role):
            self._probe.tenant_selection_overridden(
                subject=subject, requested_tenant_id=requested, path=path
            )
            return requested

        claim_name = self._config.tenant_claim_name
        namespaces = self._config.claim_namespaces
        if requested is None:
            tenant_id = normalize_claims(principal.claims, claim_name, namespaces)
            if tenant_id is not None:
                return tenant_id

        claimed = collect_claim_values(principal.claims, claim_name, namespaces)
        if not claimed:
            self._probe.tenant_claim_missing(subject=subject, path=path)
            raise TenantRequiredError()
        if requested is None:
            self._probe.tenant_selection_required(
                subject=subject, claimed_count=len(claimed), path=path
            )
            raise TenantRequiredError()
        if requested not in claimed:
            self._probe.tenant_selection_rejected(
                subject=subject, requested_tenant_id=requested, path=path
            )
            raise TenantNotFoundAccessError()
        return requested

    @asynccontextmanager
    async def open_scope(
        self,
        principal: AuthenticatedPrincipal | None,
        path: str,
        requested_tenant_id: str | None = None,
    ) -> AsyncIterator[TenantScope | None]:
        """Resolve and validate the caller's tenant for one request.

        Yields ``None`` for exempt paths. Otherwise yields a ``TenantScope``
        whose session stays usable until the ``async with`` block exits;
        the tenant connection is released on every exit path.

        Raises:
            TenantAccessError: One category per terminal failure
        """
        if self._config.is_exempt(path):
            self._probe.resolution_skipped(path=path)
            yield None
            return

        tenant_id = self.extract_tenant_id(principal, path, requested_tenant_id)

        async with AsyncExitStack() as stack:
            handle = await self._resolve_and_validate(stack, tenant_id)
            self._probe.tenant_resolved(
                tenant_id=tenant_id, database_name=handle.database_name
            )
            yield TenantScope(
                context=TenantContext(
                    tenant_id=tenant_id, database_name=handle.database_name
                ),
                session=handle.session,
            )

    async def _resolve_and_validate(
        self, stack: AsyncExitStack, tenant_id: str
    ) -> TenantDatabaseHandle:
        target: ConnectionTarget | None = None
        try:
            async with asyncio.timeout(self._config.resolution_timeout):
                target = await self._resolver.resolve(tenant_id)
                return await stack.enter_async_context(
                    self._validator.open_validated(tenant_id, target)
                )
        except (TenantNotFoundError, TenantMisconfiguredError) as e:
            self._probe.tenant_not_found(tenant_id=tenant_id, reason=str(e))
            raise TenantNotFoundAccessError() from e
        except TenantIdentityError as e:
            self._probe.tenant_integrity_failed(
                tenant_id=tenant_id,
                database_name=e.database_name,
                kind=e.kind,
                detail=str(e),
            )
            raise TenantIntegrityAccessError() from e
        except TenantDatabaseUnavailableError as e:
            attempts = (
                e.attempts if isinstance(e, ConnectionAttemptsExhaustedError) else 1
            )
            self._probe.tenant_database_unavailable(
                tenant_id=tenant_id,
                database_name=target.database_name if target else None,
                attempts=attempts,
                error=str(e),
            )
            raise ServiceUnavailableError() from e
        except TimeoutError as e:
            self._probe.resolution_timed_out(
                tenant_id=tenant_id,
                timeout_seconds=self._config.resolution_timeout,
            )
            raise ServiceUnavailableError() from e
