"""create tenants table

Revision ID: 3f1c9a7e2b40
Revises:
Create Date: 2026-10-18 09:12:40.118214

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1c9a7e2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(length=26), nullable=False),  # ULID
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("database_name", sa.String(length=255), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("metadata", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column(
            "is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("updated_by", sa.String(length=255), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id"),
    )
    # Slugs and database names stay unique across deleted rows too
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)
    op.create_index(
        "ix_tenants_database_name", "tenants", ["database_name"], unique=True
    )
    op.create_index("ix_tenants_is_deleted", "tenants", ["is_deleted"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_tenants_is_deleted", table_name="tenants")
    op.drop_index("ix_tenants_database_name", table_name="tenants")
    op.drop_index("ix_tenants_slug", table_name="tenants")
    op.drop_table("tenants")
