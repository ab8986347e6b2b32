"""initial schema

Revision ID: 3f9c1a7d2b40
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3f9c1a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Timestamps are stored as UTC ISO-8601 strings.
    op.create_table(
        "maintenance_bills",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("society_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("flat_number", sa.String(32), nullable=False),
        sa.Column("period", sa.String(7), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("approval_status", sa.String(32), nullable=False),
        sa.Column("generated_at", sa.String(40), nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("document", sa.Text, nullable=False),
        sa.PrimaryKeyConstraint("id", "society_id"),
    )
    op.create_index("ix_maintenance_bills_society_generated", "maintenance_bills", ["society_id", "generated_at"])
    op.create_index("ix_maintenance_bills_society_user", "maintenance_bills", ["society_id", "user_id"])
    op.create_index("ix_maintenance_bills_society_flat", "maintenance_bills", ["society_id", "flat_number"])
    op.create_index("ix_maintenance_bills_society_period", "maintenance_bills", ["society_id", "period"])
    op.create_index("ix_maintenance_bills_society_status", "maintenance_bills", ["society_id", "status"])

    op.create_table(
        "billing_configs",
        sa.Column("seq", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(26), nullable=False, unique=True),
        sa.Column("society_id", sa.String(64), nullable=False),
        sa.Column("effective_from", sa.String(10), nullable=False),
        sa.Column("document", sa.Text, nullable=False),
        sa.Column("created_at", sa.String(40), nullable=False),
    )
    op.create_index("ix_billing_configs_society", "billing_configs", ["society_id", "effective_from"], unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.String(64), nullable=False),
        sa.Column("actor_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("society_id", sa.String(64), nullable=False, server_default=""),
        sa.Column("entity_type", sa.String(50), nullable=False, server_default=""),
        sa.Column("entity_id", sa.String(64), nullable=False, server_default=""),
        sa.Column("previous_state", sa.Text, nullable=True),
        sa.Column("new_state", sa.Text, nullable=True),
        sa.Column("metadata", sa.Text, nullable=False, server_default="{}"),
        sa.Column("created_at", sa.String(40), nullable=False),
    )
    op.create_index("ix_audit_logs_event_type", "audit_logs", ["event_type"])
    op.create_index("ix_audit_logs_society", "audit_logs", ["society_id"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("audience", sa.String(16), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("society_id", sa.String(64), nullable=True),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("link", sa.String(255), nullable=False, server_default=""),
        sa.Column("is_read", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.String(40), nullable=False),
    )
    op.create_index("ix_notifications_user", "notifications", ["audience", "user_id"])
    op.create_index("ix_notifications_society", "notifications", ["audience", "society_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_society", table_name="notifications")
    op.drop_index("ix_notifications_user", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_index("ix_audit_logs_society", table_name="audit_logs")
    op.drop_index("ix_audit_logs_event_type", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_billing_configs_society", table_name="billing_configs")
    op.drop_table("billing_configs")
    op.drop_index("ix_maintenance_bills_society_status", table_name="maintenance_bills")
    op.drop_index("ix_maintenance_bills_society_period", table_name="maintenance_bills")
    op.drop_index("ix_maintenance_bills_society_flat", table_name="maintenance_bills")
    op.drop_index("ix_maintenance_bills_society_user", table_name="maintenance_bills")
    op.drop_index("ix_maintenance_bills_society_generated", table_name="maintenance_bills")
    op.drop_table("maintenance_bills")
