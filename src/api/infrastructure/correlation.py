"""Correlation id middleware.

Attaches a per-request correlation identifier to ``request.state`` and to
structlog's context variables, and echoes it back in the response headers.
Downstream code only ever reads the value; it is created here.
"""

from __future__ import annotations

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Incoming ids are echoed into logs and headers, so keep them short and printable
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def get_correlation_id(request: Request) -> str | None:
    """Return the correlation id attached to the request, if any."""
    return getattr(request.state, "correlation_id", None)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Correlation-ID or generate a new one."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Bind the correlation id for the duration of the request.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            The downstream response with the X-Correlation-ID header set
        """
        incoming = request.headers.get(CORRELATION_ID_HEADER, "")
        if _VALID_CORRELATION_ID.match(incoming):
            correlation_id = incoming
        else:
            correlation_id = uuid.uuid4().hex

        request.state.correlation_id = correlation_id

        with structlog.contextvars.bound_contextvars(correlation_id=correlation_id):
            response = await call_next(request)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
