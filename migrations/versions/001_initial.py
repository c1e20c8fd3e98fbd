"""Create example tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _lifecycle_columns() -> list:
    return [
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("status", sa.Integer, nullable=False, server_default="2", index=True),
        sa.Column("lock_version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("detail_info", sa.JSON, nullable=True),
        sa.Column("sync", sa.Integer, nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "example",
        *_lifecycle_columns(),
        sa.Column("name", sa.String(255), nullable=True),
    )

    op.create_table(
        "example_item",
        *_lifecycle_columns(),
        sa.Column("example_id", sa.Integer, nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("specification", sa.JSON, nullable=True),
    )
    op.create_index("ix_example_item_example_id", "example_item", ["example_id"])


def downgrade() -> None:
    op.drop_index("ix_example_item_example_id", table_name="example_item")
    op.drop_table("example_item")
    op.drop_table("example")
