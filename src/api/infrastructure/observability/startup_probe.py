"""Lifecycle probe for the API process.

Startup is the only place configuration is validated; a bad configuration
is logged here once and then aborts the process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    def configuration_loaded(self, exempt_path_prefixes: list[str]) -> None:
        """Settings validated; lists the paths that bypass tenant routing."""
        ...

    def configuration_invalid(self, error: Exception) -> None:
        """Settings failed validation and the process will not serve."""
        ...

    def application_stopped(self) -> None:
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        ...


class DefaultStartupProbe:
    """Logs lifecycle events through structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        return DefaultStartupProbe(logger=self._logger, context=context)

    def configuration_loaded(self, exempt_path_prefixes: list[str]) -> None:
        self._logger.info(
            "configuration_loaded",
            exempt_path_prefixes=exempt_path_prefixes,
            **self._get_context_kwargs(),
        )

    def configuration_invalid(self, error: Exception) -> None:
        self._logger.critical(
            "configuration_invalid",
            error=str(error),
            message="Required configuration is missing or invalid; refusing to start.",
            **self._get_context_kwargs(),
        )

    def application_stopped(self) -> None:
        self._logger.info("application_stopped", **self._get_context_kwargs())
