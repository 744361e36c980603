"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.correlation import CorrelationIdMiddleware
from infrastructure.database.dependencies import (
    close_database_connections,
    get_directory_session,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    get_database_settings,
    get_oidc_settings,
    get_settings,
    get_tenancy_settings,
)
from infrastructure.version import __version__
from tenancy.presentation import solution_router, tenant_router
from tenancy.presentation.errors import register_exception_handlers


@asynccontextmanager
async def lms_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Eager loading of required configuration (missing values abort startup)
    - Directory connection pool shutdown
    """
    settings = get_settings()
    configure_logging(debug=settings.debug)
    probe = DefaultStartupProbe()

    try:
        get_database_settings()
        tenancy = get_tenancy_settings()
        get_oidc_settings()
    except ValidationError as e:
        probe.configuration_invalid(e)
        raise

    probe.configuration_loaded(exempt_path_prefixes=tenancy.exempt_path_prefixes)

    yield

    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title="Atomic LMS API",
    description="Multi-tenant learning management backend",
    version=__version__,
    lifespan=lms_lifespan,
)

app.add_middleware(CorrelationIdMiddleware)
register_exception_handlers(app)

# Tenancy bounded context routes
app.include_router(solution_router)
app.include_router(tenant_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db(
    session: Annotated[AsyncSession, Depends(get_directory_session)],
) -> dict:
    """Check the Tenant Directory connection."""
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "ok", "connected": True}
    except Exception as e:
        return {
            "status": "error",
            "connected": False,
            "error": type(e).__name__,
        }
