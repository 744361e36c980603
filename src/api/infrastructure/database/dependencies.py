"""Database dependency injection for FastAPI.

Provides the Tenant Directory session factory with proper connection
pooling. Tenant databases are never reached through this module; see
``tenancy.infrastructure.tenant_database_gateway``.
"""

from __future__ import annotations

import threading
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_directory_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Module-level engine instance (created on first use)
_directory_engine: AsyncEngine | None = None

# Module-level sessionmaker instance (created with the engine)
_directory_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_directory_engine() -> AsyncEngine:
    """Get the Tenant Directory engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.
    Also creates and caches the sessionmaker for efficient session creation.

    Returns:
        Configured async engine for the directory database
    """
    global _directory_engine, _directory_sessionmaker
    if _directory_engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _directory_engine is None:
                settings = get_database_settings()
                _directory_engine = create_directory_engine(settings)
                _directory_sessionmaker = async_sessionmaker(
                    _directory_engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.pool_initialized(
                    min_conn=settings.pool_min_connections,
                    max_conn=settings.pool_max_connections,
                )
    return _directory_engine


def get_directory_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the Tenant Directory sessionmaker, initializing the engine if needed."""
    get_directory_engine()
    assert _directory_sessionmaker is not None
    return _directory_sessionmaker


async def get_directory_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a directory session (FastAPI dependency).

    The session is configured to NOT auto-commit. Callers that mutate must
    explicitly manage transactions using ``async with session.begin()``.

    Yields:
        AsyncSession for directory database operations
    """
    async with get_directory_sessionmaker()() as session:
        yield session


async def close_database_connections() -> None:
    """Close the directory engine's connections.

    Should be called on application shutdown to properly cleanup connections.
    Also resets the sessionmaker to allow reinitialization.
    """
    global _directory_engine, _directory_sessionmaker

    if _directory_engine is not None:
        await _directory_engine.dispose()
        _probe.pool_closed()
        _directory_engine = None
        _directory_sessionmaker = None
