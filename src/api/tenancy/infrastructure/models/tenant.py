"""SQLAlchemy ORM model for the Tenant Directory ``tenants`` table."""

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import AuditMixin, DirectoryBase


class TenantModel(DirectoryBase, AuditMixin):
    """ORM model for the tenants table.

    ``slug`` and ``database_name`` are globally unique. Rows are never
    hard-deleted; ``is_deleted`` hides them from every lookup.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )
    database_name: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True, default=""
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # "metadata" is reserved on declarative classes
    tenant_metadata: Mapped[dict[str, str]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )

    def __repr__(self) -> str:
        return f"<TenantModel(id={self.id}, slug={self.slug})>"
