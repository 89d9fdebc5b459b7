"""per-user view ledger for deduplicated view counts

Revision ID: 0002_view_records
Revises: 0001_initial
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0002_view_records"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # The composite primary key is the conflict target of the view upsert.
    op.create_table(
        "view_records",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "property_id", name="pk_view_records"),
    )


def downgrade() -> None:
    op.drop_table("view_records")
