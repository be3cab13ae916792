"""initial vacation allotment schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "vacation_allotment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("period_label", sa.String(length=20), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("advance_days_used", sa.Integer(), server_default="0", nullable=False),
        sa.Column("flexible_days_available", sa.Integer(), nullable=False),
        sa.Column("flexible_days_used", sa.Integer(), server_default="0", nullable=False),
        sa.Column("block_days_available", sa.Integer(), nullable=False),
        sa.Column("block_days_used", sa.Integer(), server_default="0", nullable=False),
        sa.Column("status", sa.String(length=50), server_default="PENDING", nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "period_label", name="uq_allotment_employee_period"),
        sa.CheckConstraint("flexible_days_used <= flexible_days_available", name="ck_allotment_flexible_pool"),
        sa.CheckConstraint("block_days_used <= block_days_available", name="ck_allotment_block_pool"),
        sa.CheckConstraint("advance_days_used >= 0", name="ck_allotment_advance_non_negative"),
    )
    op.create_index("ix_vacation_allotment_employee_id", "vacation_allotment", ["employee_id"])

    op.create_table(
        "vacation_range",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("allotment_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("requested_days", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=50), nullable=False),
        sa.Column("includes_weekend_extension", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="ACTIVE", nullable=False),
        sa.Column("is_advance", sa.Boolean(), nullable=False),
        sa.Column("rescheduled_from", sa.JSON(), nullable=False),
        sa.Column("rescheduled_to", sa.Uuid(), nullable=True),
        sa.Column("external_document_id", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["allotment_id"], ["vacation_allotment.id"], ondelete="CASCADE"),
        sa.CheckConstraint("start_date <= end_date", name="ck_range_date_order"),
        sa.CheckConstraint("requested_days > 0", name="ck_range_requested_days"),
    )
    op.create_index("ix_vacation_range_allotment_id", "vacation_range", ["allotment_id"])
    op.create_index("ix_vacation_range_employee_id", "vacation_range", ["employee_id"])
    op.create_index("ix_range_allotment_status", "vacation_range", ["allotment_id", "status"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_employee_id", "audit_log", ["employee_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("vacation_range")
    op.drop_table("vacation_allotment")
