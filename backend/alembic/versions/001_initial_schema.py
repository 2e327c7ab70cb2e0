"""Initial schema: activities, bookings, admin users and audit logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Activities table
    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("image", sa.String(500), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("get_your_guide_price", sa.Integer(), nullable=True),
        sa.Column("duration_hours", sa.Integer(), nullable=True),
        sa.Column("includes_food", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("includes_transportation", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("max_group_size", sa.Integer(), nullable=True),
        sa.Column("price_type", sa.String(20), nullable=False, server_default="per_person"),
        sa.Column("created_by", sa.String(100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price > 0", name="check_activity_price_positive"),
        sa.CheckConstraint(
            "max_group_size IS NULL OR max_group_size > 0",
            name="check_activity_max_group_size_positive",
        ),
        sa.CheckConstraint("price_type IN ('fixed', 'per_person')", name="check_activity_price_type"),
    )
    op.create_index("ix_activities_id", "activities", ["id"])

    # Bookings table. activity_id is intentionally not a foreign key.
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("activity_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("people", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("crm_reference", sa.String(100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("people > 0", name="check_booking_people_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    # Serves the per-(activity, day) capacity sum
    op.create_index("ix_bookings_activity_date", "bookings", ["activity_id", "date"])

    # Admin users table
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="admin"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'superadmin')", name="check_admin_role"),
    )
    op.create_index("ix_admin_users_id", "admin_users", ["id"])
    op.create_index("ix_admin_users_username", "admin_users", ["username"], unique=True)

    # Audit logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_id", "audit_logs", ["id"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("admin_users")
    op.drop_table("bookings")
    op.drop_table("activities")
