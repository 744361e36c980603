"""Domain probe for integration test cleanup operations.

Records cleanup of the Tenant Directory and of tenant databases as
domain events rather than raw logger calls.
"""

from typing import Protocol

import structlog


class TestCleanupProbe(Protocol):
    """Observability probe for test cleanup operations."""

    def table_cleaned(
        self,
        database: str,
        table_name: str,
        rows_deleted: int | None = None,
    ) -> None:
        """Record table cleanup."""
        ...

    def tenant_database_created(self, database: str) -> None:
        """Record that a scratch tenant database was created."""
        ...

    def cleanup_failed(
        self,
        database: str,
        error: str,
    ) -> None:
        """Record cleanup failure."""
        ...


class DefaultTestCleanupProbe:
    """Default test cleanup probe using structlog."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger()

    def table_cleaned(
        self, database: str, table_name: str, rows_deleted: int | None = None
    ) -> None:
        """Record table cleanup."""
        self._logger.debug(
            "test_table_cleaned",
            database=database,
            table_name=table_name,
            rows_deleted=rows_deleted,
        )

    def tenant_database_created(self, database: str) -> None:
        """Record that a scratch tenant database was created."""
        self._logger.info("test_tenant_database_created", database=database)

    def cleanup_failed(self, database: str, error: str) -> None:
        """Record cleanup failure."""
        self._logger.error(
            "test_cleanup_failed",
            database=database,
            error=error,
        )
