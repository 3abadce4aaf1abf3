"""initial schema"""

from alembic import op
import sqlalchemy as sa


revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("race_date", sa.Date(), nullable=False),
        sa.Column("race_name", sa.String(length=200), nullable=True),
        sa.Column("weekly_goal", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("weekly_goal between 1 and 7", name="ck_settings_weekly_goal"),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("strava_id", sa.String(length=80), nullable=False, unique=True),
        sa.Column("type", sa.String(length=40), nullable=False, server_default="Run"),
        sa.Column("name", sa.String(length=200), nullable=False, server_default="Untitled Activity"),
        sa.Column("distance", sa.Float(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("avg_heart_rate", sa.Integer(), nullable=True),
        sa.Column("max_heart_rate", sa.Integer(), nullable=True),
        sa.Column("avg_pace", sa.Float(), nullable=True),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("perceived_effort", sa.Integer(), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_activities_date", "activities", ["date"])

    op.create_table(
        "planned_workouts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("distance", sa.Float(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("activity_id", sa.Integer(), sa.ForeignKey("activities.id", ondelete="SET NULL"), nullable=True),
        sa.CheckConstraint("day_of_week between 0 and 6", name="ck_planned_workouts_day"),
        sa.CheckConstraint("week_number >= 1", name="ck_planned_workouts_week"),
    )
    op.create_index("ix_planned_workouts_slot", "planned_workouts", ["week_number", "day_of_week"])

    op.create_table(
        "run_analyses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("activity_id", sa.Integer(), sa.ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("insights", sa.Text(), nullable=False),
        sa.Column("pace_analysis", sa.Text(), nullable=True),
        sa.Column("hr_analysis", sa.Text(), nullable=True),
        sa.Column("comparison", sa.Text(), nullable=True),
        sa.Column("suggestions", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade() -> None:
    op.drop_table("run_analyses")
    op.drop_index("ix_planned_workouts_slot", table_name="planned_workouts")
    op.drop_table("planned_workouts")
    op.drop_index("ix_activities_date", table_name="activities")
    op.drop_table("activities")
    op.drop_table("settings")
