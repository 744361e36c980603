"""SQLAlchemy ORM model for the identity table inside each tenant database."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import TenantDatabaseBase

IDENTITY_TABLE_NAME = "__tenant_identity"


class TenantIdentityModel(TenantDatabaseBase):
    """ORM model for the tenant identity table.

    Holds exactly one row per tenant database.
    """

    __tablename__ = IDENTITY_TABLE_NAME

    tenant_id: Mapped[str] = mapped_column(String(26), primary_key=True)
    database_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    validation_hash: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    creation_metadata: Mapped[str] = mapped_column(
        String(1000), nullable=False, default=""
    )

    def __repr__(self) -> str:
        return (
            f"<TenantIdentityModel(tenant_id={self.tenant_id}, "
            f"database_name={self.database_name})>"
        )
