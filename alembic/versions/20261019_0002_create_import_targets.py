"""create strategic_goals and industry_metrics tables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:10:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "strategic_goals",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, comment="planned, active, completed, paused"),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("target_value", sa.Float(), nullable=True),
        sa.Column("current_value", sa.Float(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "name", name="uq_strategic_goals_user_name"),
    )
    op.create_index("ix_strategic_goals_user_id", "strategic_goals", ["user_id"], unique=False)
    op.create_index("ix_strategic_goals_status", "strategic_goals", ["status"], unique=False)

    op.create_table(
        "industry_metrics",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("source", sa.String(length=255), nullable=True),
        sa.Column("previous_value", sa.Float(), nullable=True),
        sa.Column("trend", sa.String(length=16), nullable=True, comment="up, down, stable"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_industry_metrics_user_id", "industry_metrics", ["user_id"], unique=False)
    op.create_index("ix_industry_metrics_category", "industry_metrics", ["category"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_industry_metrics_category", table_name="industry_metrics")
    op.drop_index("ix_industry_metrics_user_id", table_name="industry_metrics")
    op.drop_table("industry_metrics")
    op.drop_index("ix_strategic_goals_status", table_name="strategic_goals")
    op.drop_index("ix_strategic_goals_user_id", table_name="strategic_goals")
    op.drop_table("strategic_goals")
