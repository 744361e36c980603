"""Application-layer value objects for the Tenancy bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.middleware import TenantContext


@dataclass(frozen=True)
class TenantScope:
    """A validated tenant context plus the session bound to its database.

    Lives for exactly one request. The session must not be kept after the
    request ends; the connection behind it is closed at that point.
    """

    context: TenantContext
    session: AsyncSession
