# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from vacation_scheduler.models.base import TimestampMixin, UUIDBase
from vacation_scheduler.models.enums import RangeStatus


class VacationRange(UUIDBase, TimestampMixin, table=True):
    """One contiguous vacation booking, active or retired by a reschedule."""

    __tablename__ = "vacation_range"
    __table_args__ = (
        sa.Index("ix_range_allotment_status", "allotment_id", "status"),
        sa.CheckConstraint("start_date <= end_date", name="ck_range_date_order"),
        sa.CheckConstraint("requested_days > 0", name="ck_range_requested_days"),
    )

    allotment_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("vacation_allotment.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    employee_id: uuid.UUID = Field(index=True)
    start_date: date
    end_date: date
    requested_days: int
    kind: str = Field(max_length=50)
    includes_weekend_extension: bool = Field(default=False)
    status: str = Field(default=RangeStatus.ACTIVE, max_length=50, sa_column_kwargs={"server_default": "ACTIVE"})
    is_advance: bool = Field(default=False)
    rescheduled_from: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    rescheduled_to: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)
    external_document_id: str | None = Field(default=None, max_length=255)
