"""Database engine creation for async SQLAlchemy.

Two kinds of engines exist:

- The Tenant Directory engine is a process-wide pooled engine for the shared
  directory database.
- Tenant database engines are created per resolution with ``NullPool`` so that
  no connection to a tenant database outlives the request that opened it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "create_directory_engine",
    "create_tenant_engine",
    "redact_url",
]


def create_directory_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the async engine for the shared Tenant Directory database.

    Args:
        settings: Database connection settings

    Returns:
        Configured async engine with a bounded connection pool
    """
    return create_async_engine(
        settings.directory_url.get_secret_value(),
        pool_size=settings.pool_max_connections,
        max_overflow=0,  # No overflow - strict pool limit
        pool_pre_ping=True,
        echo=settings.echo,
    )


def create_tenant_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create a short-lived async engine for one tenant database.

    ``NullPool`` closes the DBAPI connection as soon as it is released, so
    disposing the engine at the end of the request leaves nothing behind.

    Args:
        url: Fully substituted tenant database URL
        echo: Log SQL statements

    Returns:
        Async engine without connection pooling
    """
    return create_async_engine(url, poolclass=NullPool, echo=echo)


def redact_url(url: str) -> str:
    """Render a database URL with the password masked, for logging."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<unparseable url>"
