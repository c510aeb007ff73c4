"""create saved search tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "saved_search_types",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("options", JSONDocument, nullable=False),
        sa.Column("notification_plugin", sa.String(length=64), nullable=False),
        sa.Column("notification_configuration", JSONDocument, nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("saved_search_types", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_saved_search_types_is_default"), ["is_default"], unique=False)

    op.create_table(
        "saved_searches",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("type_id", sa.String(length=64), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("mail", sa.String(length=254), nullable=True),
        sa.Column("index_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.Boolean(), nullable=False),
        sa.Column("query_payload", sa.Text(), nullable=False),
        sa.Column("options", JSONDocument, nullable=False),
        sa.Column("notify_interval", sa.Integer(), nullable=False),
        sa.Column("known_results_primed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_executed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_execution_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("saved_searches", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_saved_searches_type_id"), ["type_id"], unique=False)
        batch_op.create_index("idx_saved_searches_due", ["status", "next_execution_at"], unique=False)
        batch_op.create_index("idx_saved_searches_owner_created", ["owner_id", "created_at"], unique=False)

    op.create_table(
        "saved_search_known_results",
        sa.Column("search_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["search_id"], ["saved_searches.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("search_id", "item_id"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("saved_search_known_results")

    with op.batch_alter_table("saved_searches", schema=None) as batch_op:
        batch_op.drop_index("idx_saved_searches_owner_created")
        batch_op.drop_index("idx_saved_searches_due")
        batch_op.drop_index(batch_op.f("ix_saved_searches_type_id"))
    op.drop_table("saved_searches")

    with op.batch_alter_table("saved_search_types", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_saved_search_types_is_default"))
    op.drop_table("saved_search_types")
