from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20250301_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("platform", sa.String(length=16), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("avatar", sa.String(length=512), nullable=True),
        sa.Column("solved_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("contest_rank", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("last_updated", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("platform IN ('leetcode','codeforces','codechef')", name="ck_profiles_platform"),
    )
    op.create_index("ix_profiles_username", "profiles", ["username"], unique=True)
    op.create_index("ix_profiles_platform_solved", "profiles", ["platform", "solved_count"])
    op.create_index("ix_profiles_last_updated", "profiles", ["last_updated"])

    op.create_table(
        "profile_activity",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("profile_id", sa.Uuid(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("difficulty", sa.String(length=8), nullable=False),
        sa.CheckConstraint("difficulty IN ('easy','medium','hard')", name="ck_profile_activity_difficulty"),
    )
    op.create_index("ix_profile_activity_profile_date", "profile_activity", ["profile_id", "date"])
    op.create_index("ix_profile_activity_date", "profile_activity", ["date"])

def downgrade() -> None:
    op.drop_index("ix_profile_activity_date", table_name="profile_activity")
    op.drop_index("ix_profile_activity_profile_date", table_name="profile_activity")
    op.drop_table("profile_activity")
    op.drop_index("ix_profiles_last_updated", table_name="profiles")
    op.drop_index("ix_profiles_platform_solved", table_name="profiles")
    op.drop_index("ix_profiles_username", table_name="profiles")
    op.drop_table("profiles")
