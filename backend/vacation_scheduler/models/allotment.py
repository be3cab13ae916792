# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from vacation_scheduler.models.base import TimestampMixin, UUIDBase
from vacation_scheduler.models.enums import AllotmentStatus


class VacationAllotment(UUIDBase, TimestampMixin, table=True):
    """An employee's vacation-day budget for one vacation year.

    Pool counters are only changed by the range, reschedule and advance
    services, always inside a single transaction.
    """

    __tablename__ = "vacation_allotment"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "period_label", name="uq_allotment_employee_period"),
        sa.CheckConstraint("flexible_days_used <= flexible_days_available", name="ck_allotment_flexible_pool"),
        sa.CheckConstraint("block_days_used <= block_days_available", name="ck_allotment_block_pool"),
        sa.CheckConstraint("advance_days_used >= 0", name="ck_allotment_advance_non_negative"),
    )

    employee_id: uuid.UUID = Field(index=True)
    period_label: str = Field(max_length=20)
    period_start: date
    period_end: date
    total_days: int = Field(default=30)
    advance_days_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    flexible_days_available: int = Field(default=7)
    flexible_days_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    block_days_available: int = Field(default=23)
    block_days_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    status: str = Field(
        default=AllotmentStatus.PENDING, max_length=50, sa_column_kwargs={"server_default": "PENDING"}
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
