"""Probe for bearer token verification and signing key retrieval.

Rejections are logged with a short reason only; token contents never reach
the log.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    def principal_authenticated(self, subject: str, role_count: int) -> None:
        ...

    def token_rejected(self, reason: str) -> None:
        """Signature, issuer, audience or expiry check failed."""
        ...

    def jwks_fetched(self, key_count: int) -> None:
        ...

    def jwks_cache_hit(self) -> None:
        ...

    def jwks_fetch_failed(self, error: str) -> None:
        """The identity provider's key set could not be downloaded."""
        ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe:
        ...


class DefaultJWTValidatorProbe:
    """structlog implementation of JWTValidatorProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultJWTValidatorProbe:
        return DefaultJWTValidatorProbe(logger=self._logger, context=context)

    def principal_authenticated(self, subject: str, role_count: int) -> None:
        self._logger.debug(
            "principal_authenticated",
            subject=subject,
            role_count=role_count,
            **self._get_context_kwargs(),
        )

    def token_rejected(self, reason: str) -> None:
        self._logger.warning(
            "bearer_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def jwks_fetched(self, key_count: int) -> None:
        self._logger.info(
            "jwks_fetched",
            key_count=key_count,
            **self._get_context_kwargs(),
        )

    def jwks_cache_hit(self) -> None:
        self._logger.debug("jwks_cache_hit", **self._get_context_kwargs())

    def jwks_fetch_failed(self, error: str) -> None:
        self._logger.error(
            "jwks_fetch_failed",
            error=error,
            **self._get_context_kwargs(),
        )
