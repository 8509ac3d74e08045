from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20250301_0002"
down_revision = "20250301_0001"
branch_labels = None
depends_on = None

STATUSES = "('accepted','wrong_answer','time_limit_exceeded','runtime_error','compilation_error')"

def upgrade() -> None:
    op.create_table(
        "submission_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("platform", sa.String(length=16), nullable=False),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("problem_id", sa.String(length=64), nullable=False),
        sa.Column("problem_title", sa.String(length=255), nullable=False),
        sa.Column("difficulty", sa.String(length=8), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("language", sa.String(length=32), nullable=False),
        sa.Column("execution_time", sa.Integer(), nullable=True),
        sa.Column("memory_used", sa.Float(), nullable=True),
        sa.Column("contest_id", sa.String(length=64), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("platform IN ('leetcode','codeforces','codechef')", name="ck_submission_events_platform"),
        sa.CheckConstraint(f"status IN {STATUSES}", name="ck_submission_events_status"),
    )
    op.create_index("ix_submission_events_submitted_platform", "submission_events", ["submitted_at", "platform"])
    op.create_index("ix_submission_events_user_platform", "submission_events", ["user_id", "platform"])
    op.create_index("ix_submission_events_user_status", "submission_events", ["user_id", "status"])
    op.create_index("ix_submission_events_user_difficulty", "submission_events", ["user_id", "difficulty"])

def downgrade() -> None:
    op.drop_index("ix_submission_events_user_difficulty", table_name="submission_events")
    op.drop_index("ix_submission_events_user_status", table_name="submission_events")
    op.drop_index("ix_submission_events_user_platform", table_name="submission_events")
    op.drop_index("ix_submission_events_submitted_platform", table_name="submission_events")
    op.drop_table("submission_events")
