from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261001_0002"
down_revision = "20261001_0001"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "daily_progress",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("tasks", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("task_inputs", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("pages_read", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("distance_km", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_progress_user_date"),
        sa.CheckConstraint("completed_count >= 0 AND completed_count <= 10", name="ck_daily_progress_completed_range"),
        sa.CheckConstraint("pages_read >= 0", name="ck_daily_progress_pages_nonneg"),
        sa.CheckConstraint("distance_km >= 0", name="ck_daily_progress_distance_nonneg"),
    )
    op.create_index("ix_daily_progress_user_id", "daily_progress", ["user_id"])
    op.create_index("ix_daily_progress_date", "daily_progress", ["date"])

def downgrade() -> None:
    op.drop_index("ix_daily_progress_date", table_name="daily_progress")
    op.drop_index("ix_daily_progress_user_id", table_name="daily_progress")
    op.drop_table("daily_progress")
