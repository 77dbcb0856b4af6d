"""Create users, measurement, alert, settings and backup tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("diabetes_type", sa.String(32), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("diagnosis_date", sa.Date(), nullable=True),
        sa.Column("target_glucose_min", sa.Integer(), nullable=False),
        sa.Column("target_glucose_max", sa.Integer(), nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "glucose_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("period", sa.String(32), nullable=False),
        sa.Column("glucose_value", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "date", "period", name="uq_glucose_records_user_date_period"
        ),
    )
    op.create_index("ix_glucose_records_user_id", "glucose_records", ["user_id"])
    op.create_index(
        "ix_glucose_records_user_date", "glucose_records", ["user_id", "date"]
    )
    op.create_index(
        "ix_glucose_records_user_period", "glucose_records", ["user_id", "period"]
    )

    op.create_table(
        "insulin_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("period", sa.String(32), nullable=False),
        sa.Column("insulin_type", sa.String(32), nullable=False),
        sa.Column("units", sa.Numeric(5, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "date", "period", name="uq_insulin_records_user_date_period"
        ),
    )
    op.create_index("ix_insulin_records_user_id", "insulin_records", ["user_id"])
    op.create_index(
        "ix_insulin_records_user_date", "insulin_records", ["user_id", "date"]
    )
    op.create_index(
        "ix_insulin_records_user_period", "insulin_records", ["user_id", "period"]
    )

    op.create_table(
        "alerts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("glucose_value", sa.Integer(), nullable=True),
        sa.Column(
            "read",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_alerts_user_id", "alerts", ["user_id"])
    op.create_index("ix_alerts_user_type", "alerts", ["user_id", "type"])
    op.create_index("ix_alerts_user_read", "alerts", ["user_id", "read"])

    op.create_table(
        "user_settings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("notification_settings", sa.JSON(), nullable=False),
        sa.Column("privacy_settings", sa.JSON(), nullable=False),
        sa.Column("data_settings", sa.JSON(), nullable=False),
        sa.Column("reminder_times", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_user_settings_user_id", "user_settings", ["user_id"], unique=True
    )

    op.create_table(
        "backups",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_backups_user_id", "backups", ["user_id"])
    op.create_index("ix_backups_user_status", "backups", ["user_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_backups_user_status")
    op.drop_index("ix_backups_user_id")
    op.drop_table("backups")

    op.drop_index("ix_user_settings_user_id")
    op.drop_table("user_settings")

    op.drop_index("ix_alerts_user_read")
    op.drop_index("ix_alerts_user_type")
    op.drop_index("ix_alerts_user_id")
    op.drop_table("alerts")

    op.drop_index("ix_insulin_records_user_period")
    op.drop_index("ix_insulin_records_user_date")
    op.drop_index("ix_insulin_records_user_id")
    op.drop_table("insulin_records")

    op.drop_index("ix_glucose_records_user_period")
    op.drop_index("ix_glucose_records_user_date")
    op.drop_index("ix_glucose_records_user_id")
    op.drop_table("glucose_records")

    op.drop_index("ix_users_email")
    op.drop_table("users")
