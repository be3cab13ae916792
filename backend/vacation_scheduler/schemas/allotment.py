# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel

from vacation_scheduler.models.enums import AllotmentStatus


class AllotmentResponse(BaseModel):
    """Pool counters of one vacation year."""

    id: uuid.UUID
    employee_id: uuid.UUID
    period_label: str
    period_start: date
    period_end: date
    total_days: int
    advance_days_used: int
    flexible_days_available: int
    flexible_days_used: int
    block_days_available: int
    block_days_used: int
    status: AllotmentStatus
    created_at: datetime


class AllotmentListResponse(BaseModel):
    """Paginated list of allotments."""

    items: list[AllotmentResponse]
    total: int


class RemainingDaysResponse(BaseModel):
    """Days still bookable per pool, each clamped at zero."""

    flexible: int
    block: int
    total: int


class AdvanceAvailabilityResponse(BaseModel):
    """Advance days earned so far in the period and how many are borrowed."""

    available: float
    used: int
    remaining: float


class AllotmentSummaryResponse(BaseModel):
    """Allotment with derived remaining-days and advance views."""

    allotment: AllotmentResponse
    remaining: RemainingDaysResponse
    advance: AdvanceAvailabilityResponse
    active_ranges: int


class UpdateAllotmentStatusPayload(BaseModel):
    """Request body for changing an allotment's administrative status."""

    status: AllotmentStatus


class AdvanceRequestPayload(BaseModel):
    """Request body for borrowing advance days."""

    amount: int
