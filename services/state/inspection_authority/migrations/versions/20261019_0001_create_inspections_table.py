"""create inspections table"""

from __future__ import annotations

from alembic import context, op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from services.state.inspection_authority.config import (
    INSPECTION_POSTGRES_SCHEMA_DEFAULT,
)

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _schema() -> str:
    """Resolve the IAS-owned schema name configured for this run."""
    return context.config.get_main_option("postgres_schema") or INSPECTION_POSTGRES_SCHEMA_DEFAULT


def upgrade() -> None:
    """Create the authoritative inspections table."""
    schema = _schema()

    op.create_table(
        "inspections",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True, nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("technician", sa.String(length=255), nullable=False),
        sa.Column("findings", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("synced_at", sa.DateTime(timezone=True), nullable=True),
        schema=schema,
    )
    op.create_index("ix_inspections_status", "inspections", ["status"], schema=schema)


def downgrade() -> None:
    """Drop the inspections table."""
    schema = _schema()
    op.drop_index("ix_inspections_status", table_name="inspections", schema=schema)
    op.drop_table("inspections", schema=schema)
