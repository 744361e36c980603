"""SQLAlchemy declarative bases and shared model utilities.

Two independent declarative bases exist because the shared Tenant Directory
and each tenant's isolated database hold different schemas:

- ``DirectoryBase`` for tables in the shared directory database.
- ``TenantDatabaseBase`` for tables living inside every tenant database.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Generate UTC timestamp for database defaults.

    Uses a named function instead of lambda for SQLAlchemy 2.0 compatibility.
    Ensures proper INSERT-time evaluation.
    """
    return datetime.now(timezone.utc)


class DirectoryBase(DeclarativeBase):
    """Base class for ORM models stored in the shared Tenant Directory."""

    type_annotation_map: dict[type, Any] = {}


class TenantDatabaseBase(DeclarativeBase):
    """Base class for ORM models stored inside each tenant database."""

    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns.

    Automatically sets created_at on insert and updates updated_at on modification.
    Uses timezone-aware UTC timestamps with Python-side default generation.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,  # Evaluated at INSERT time
        onupdate=_utc_now,  # Evaluated at UPDATE time
        nullable=False,
    )


class AuditMixin(TimestampMixin):
    """Timestamps plus the identifiers of the actors who created and last updated a row.

    Actor columns are written by repositories from the acting principal,
    never from request payloads.
    """

    created_by: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    updated_by: Mapped[str] = mapped_column(String(255), nullable=False, default="")
