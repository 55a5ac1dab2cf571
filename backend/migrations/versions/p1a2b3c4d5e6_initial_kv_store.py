"""Initial single-key ledger store

Revision ID: p1a2b3c4d5e6
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "p1a2b3c4d5e6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Products, events, indexes, authorization edges and counters all live here
    op.create_table(
        "kv_entries",
        sa.Column("key", sa.LargeBinary(), primary_key=True),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade():
    op.drop_table("kv_entries")
