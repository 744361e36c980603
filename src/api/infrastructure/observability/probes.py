"""Connection probes for the database layer.

Covers both the pooled Tenant Directory engine and the short-lived,
per-request connections opened against tenant databases. Events carry the
database name, never the connection URL.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Events emitted while opening and releasing database connections."""

    def connection_established(self, database: str) -> None:
        """A connection to ``database`` is open and usable."""
        ...

    def connection_failed(self, database: str, error: Exception) -> None:
        """Opening a connection to ``database`` raised ``error``."""
        ...

    def connection_closed(self, database: str) -> None:
        ...

    def pool_initialized(self, min_conn: int, max_conn: int) -> None:
        """The directory engine and its pool were created."""
        ...

    def pool_closed(self) -> None:
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        ...


class DefaultConnectionProbe:
    """structlog-backed ConnectionProbe.

    Per-connection events, failures included, are debug level. Failed
    connections are retried by the caller, which logs the terminal outcome.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def connection_established(self, database: str) -> None:
        self._logger.debug(
            "database_connection_established",
            database=database,
            **self._get_context_kwargs(),
        )

    def connection_failed(self, database: str, error: Exception) -> None:
        self._logger.debug(
            "database_connection_failed",
            database=database,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def connection_closed(self, database: str) -> None:
        self._logger.debug(
            "database_connection_closed",
            database=database,
            **self._get_context_kwargs(),
        )

    def pool_initialized(self, min_conn: int, max_conn: int) -> None:
        self._logger.info(
            "connection_pool_initialized",
            min_connections=min_conn,
            max_connections=max_conn,
            **self._get_context_kwargs(),
        )

    def pool_closed(self) -> None:
        self._logger.info("connection_pool_closed", **self._get_context_kwargs())
