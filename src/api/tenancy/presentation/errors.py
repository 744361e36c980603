"""Structured error envelope and exception handlers.

Every failure response has the same shape, so clients can branch on
``status`` and ``type`` without parsing messages::

    {"type": "TenantNotFound", "title": "Tenant not found", "status": 404,
     "errors": ["Tenant not found."], "correlationId": "..."}
"""

from __future__ import annotations

from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from infrastructure.correlation import get_correlation_id
from tenancy.application.exceptions import TenantAccessError

logger = structlog.get_logger()


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing request."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="Error category")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    errors: list[str] = Field(default_factory=list, description="Error messages")
    correlation_id: str | None = Field(
        default=None,
        alias="correlationId",
        description="Correlation id of the failed request",
    )


class ApiError(Exception):
    """An error raised by route handlers and rendered as an ErrorResponse."""

    category = "Error"
    title = "Request failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class ValidationFailedError(ApiError):
    category = "Validation"
    title = "Validation failed"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ApiError):
    category = "NotFound"
    title = "Not found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    category = "Conflict"
    title = "Conflict"
    status_code = status.HTTP_409_CONFLICT


def error_response(
    request: Request,
    category: str,
    title: str,
    status_code: int,
    errors: list[str],
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope, carrying the request's correlation id."""
    body = ErrorResponse(
        type=category,
        title=title,
        status=status_code,
        errors=errors,
        correlation_id=get_correlation_id(request),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
        headers=headers,
    )


async def tenant_access_error_handler(
    request: Request, exc: TenantAccessError
) -> JSONResponse:
    # Already logged by the resolution probe
    return error_response(
        request,
        exc.category,
        exc.title,
        exc.status_code,
        exc.errors,
        headers=exc.headers or None,
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(request, exc.category, exc.title, exc.status_code, exc.errors)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        errors.append(f"{location}: {error.get('msg', 'invalid value')}")
    return error_response(
        request,
        ValidationFailedError.category,
        ValidationFailedError.title,
        status.HTTP_400_BAD_REQUEST,
        errors,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(
        request,
        "HttpError",
        HTTPStatus(exc.status_code).phrase,
        exc.status_code,
        [str(exc.detail)] if exc.detail else [],
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return error_response(
        request,
        "InternalError",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ["An internal error occurred."],
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-rendering handlers on ``app``."""
    app.add_exception_handler(TenantAccessError, tenant_access_error_handler)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
