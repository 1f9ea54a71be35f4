"""initial schema: users, auth, outbox, skills, progress, planner

Revision ID: 20261017_initial_schema
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20261017_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    # --- core ---
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("job_title", sa.String(length=150)),
        sa.Column("bio", sa.Text()),
        sa.Column("theme_preference", sa.String(length=20), nullable=False, server_default="light"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime()),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "session_token",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("jti", sa.String(length=64), nullable=False, unique=True),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("expires_at", sa.DateTime()),
        *_timestamps(),
    )

    op.create_table(
        "jwt_blocklist",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("jti", sa.String(length=64), nullable=False, unique=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL")),
        *_timestamps(),
    )

    op.create_table(
        "user_sharing_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("is_profile_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("public_username", sa.String(length=50), unique=True),
        sa.Column("show_skills", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_progress", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_goals", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_statistics", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "event_record",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(length=128), nullable=False, index=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), index=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )
    op.create_index("ix_event_record_user_created_at", "event_record", ["user_id", "created_at"])
    op.create_index("ix_event_record_user_event_type", "event_record", ["user_id", "event_type"])

    op.create_table(
        "platform_outbox",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), index=True),
        sa.Column("event_type", sa.String(length=128), nullable=False, index=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("available_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_error", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_platform_outbox_status_available_at", "platform_outbox", ["status", "available_at"]
    )

    # --- skills ---
    op.create_table(
        "skill_category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.String(length=500)),
        sa.Column("icon", sa.String(length=50)),
        sa.Column("color", sa.String(length=20)),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "skill",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("skill_category.id", ondelete="SET NULL")),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("big_goal", sa.Text()),
        sa.Column("mastery_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("total_hours_logged", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("target_hours", sa.Numeric(10, 2)),
        sa.Column("visibility", sa.String(length=20), nullable=False, server_default="private"),
        sa.Column("public_slug", sa.String(length=250), unique=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("target_date", sa.Date()),
        sa.Column("started_at", sa.DateTime()),
        sa.Column("completed_at", sa.DateTime()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="not_started"),
        sa.Column("icon", sa.String(length=50)),
        sa.Column("color", sa.String(length=20)),
        *_timestamps(),
    )
    op.create_index("ix_skill_user_status", "skill", ["user_id", "status"])
    op.create_index("ix_skill_user_category", "skill", ["user_id", "category_id"])

    op.create_table(
        "skill_schedule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "skill_id",
            sa.Integer(),
            sa.ForeignKey("skill.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("frequency", sa.String(length=20), nullable=False, server_default="weekly"),
        sa.Column("hours_per_period", sa.Numeric(5, 2), nullable=False, server_default="5"),
        sa.Column("preferred_time_slot", sa.String(length=20), nullable=False, server_default="any"),
        *_timestamps(),
    )

    op.create_table(
        "skill_schedule_day",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "schedule_id",
            sa.Integer(),
            sa.ForeignKey("skill_schedule.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.Time()),
        sa.Column("end_time", sa.Time()),
        sa.Column("label", sa.String(length=100)),
        sa.UniqueConstraint("schedule_id", "day_of_week", name="uq_schedule_day"),
    )

    op.create_table(
        "skill_goal",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("skill_id", sa.Integer(), sa.ForeignKey("skill.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("progress_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("target_hours", sa.Numeric(10, 2)),
        sa.Column("logged_hours", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("target_date", sa.Date()),
        sa.Column("started_at", sa.DateTime()),
        sa.Column("completed_at", sa.DateTime()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_ai_generated", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_skill_goal_skill_sort", "skill_goal", ["skill_id", "sort_order"])
    op.create_index("ix_skill_goal_user_status", "skill_goal", ["user_id", "status"])

    op.create_table(
        "skill_milestone",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("goal_id", sa.Integer(), sa.ForeignKey("skill_goal.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(length=50)),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_ai_generated", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_skill_milestone_goal_sort", "skill_milestone", ["goal_id", "sort_order"])

    # --- progress ---
    op.create_table(
        "progress_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("skill_id", sa.Integer(), sa.ForeignKey("skill.id", ondelete="CASCADE"), nullable=False),
        sa.Column("goal_id", sa.Integer(), sa.ForeignKey("skill_goal.id", ondelete="SET NULL")),
        sa.Column("title", sa.String(length=300)),
        sa.Column("description", sa.Text()),
        sa.Column("hours_logged", sa.Numeric(5, 2), nullable=False),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("quality_rating", sa.Integer()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("hours_logged > 0 AND hours_logged <= 24", name="ck_progress_log_hours"),
    )
    op.create_index("ix_progress_log_user_date", "progress_log", ["user_id", "log_date"])
    op.create_index("ix_progress_log_skill_date", "progress_log", ["skill_id", "log_date"])
    op.create_index("ix_progress_log_goal", "progress_log", ["goal_id"])

    op.create_table(
        "milestone_completion",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "progress_log_id",
            sa.Integer(),
            sa.ForeignKey("progress_log.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "milestone_id",
            sa.Integer(),
            sa.ForeignKey("skill_milestone.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("completed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "progress_log_id", "milestone_id", name="uq_milestone_completion_log_milestone"
        ),
    )

    op.create_table(
        "daily_stat",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("stat_date", sa.Date(), nullable=False),
        sa.Column("total_hours_logged", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("skills_practiced", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("goals_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("milestones_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("logs_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "stat_date", name="uq_daily_stat_user_date"),
    )

    # --- planner ---
    op.create_table(
        "ai_generated_plan",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("skill_id", sa.Integer(), sa.ForeignKey("skill.id", ondelete="SET NULL")),
        sa.Column("goal_description", sa.Text(), nullable=False),
        sa.Column("target_date", sa.Date()),
        sa.Column("dedication_frequency", sa.String(length=20)),
        sa.Column("dedication_hours", sa.Numeric(5, 2)),
        sa.Column("preferred_time_slot", sa.String(length=20)),
        sa.Column("clarifications", sa.JSON(), nullable=False),
        sa.Column("ai_response", sa.JSON()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        *_timestamps(),
    )


def downgrade():
    for table in (
        "ai_generated_plan",
        "daily_stat",
        "milestone_completion",
        "progress_log",
        "skill_milestone",
        "skill_goal",
        "skill_schedule_day",
        "skill_schedule",
        "skill",
        "skill_category",
        "platform_outbox",
        "event_record",
        "user_sharing_settings",
        "jwt_blocklist",
        "session_token",
        "user",
    ):
        op.drop_table(table)
