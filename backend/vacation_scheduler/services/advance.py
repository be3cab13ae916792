"""Advance engine: borrowing days earned so far in the vacation year."""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from vacation_scheduler.config import get_settings
from vacation_scheduler.db import commit_or_rollback, flush_or_rollback
from vacation_scheduler.exceptions import CapacityError
from vacation_scheduler.models.enums import AuditAction, AuditEntityType
from vacation_scheduler.schemas.allotment import AdvanceAvailabilityResponse, AllotmentResponse
from vacation_scheduler.services.allotment import _build_allotment_response, _get_allotment_or_404
from vacation_scheduler.services.audit import model_to_audit_dict, write_audit_log
from vacation_scheduler.services.clock import get_clock
from vacation_scheduler.services.dates import whole_months_elapsed

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def advance_available(
    period_start: date,
    now: date,
    days_per_month: float | None = None,
    max_days: float | None = None,
) -> float:
    """Days earned by whole months elapsed since period_start, capped at max_days."""
    settings = get_settings()
    if days_per_month is None:
        days_per_month = settings.advance_days_per_month
    if max_days is None:
        max_days = settings.advance_max_days
    months = whole_months_elapsed(period_start, now)
    return min(months * days_per_month, max_days)


def check_advance_request(amount: int, available: float, already_used: int) -> None:
    """Raise CapacityError unless amount can be borrowed."""
    if amount <= 0:
        raise CapacityError("Advance amount must be greater than zero")
    left = available - already_used
    if amount > left:
        raise CapacityError(f"Only {left:g} advance days are available so far in this period")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def get_advance_availability(session: AsyncSession, allotment_id: uuid.UUID) -> AdvanceAvailabilityResponse:
    """Advance days earned, borrowed and still borrowable as of today."""
    allotment = await _get_allotment_or_404(session, allotment_id)
    available = advance_available(allotment.period_start, get_clock().today())
    return AdvanceAvailabilityResponse(
        available=available,
        used=allotment.advance_days_used,
        remaining=max(0.0, available - allotment.advance_days_used),
    )


async def request_advance(session: AsyncSession, allotment_id: uuid.UUID, amount: int) -> AllotmentResponse:
    """Borrow advance days into the block pool.

    Raises the total and the block ceiling; no range is booked. The days
    are consumed later through a regular booking.
    """
    allotment = await _get_allotment_or_404(session, allotment_id, for_update=True)
    available = advance_available(allotment.period_start, get_clock().today())
    check_advance_request(amount, available, allotment.advance_days_used)

    before_dict = model_to_audit_dict(allotment)
    allotment.advance_days_used += amount
    allotment.total_days += amount
    allotment.block_days_available += amount
    allotment.version += 1
    await flush_or_rollback(session, "advance request")

    await write_audit_log(
        session,
        employee_id=allotment.employee_id,
        entity_type=AuditEntityType.ALLOTMENT,
        entity_id=allotment.id,
        action=AuditAction.ADVANCE,
        before_json=before_dict,
        after_json=model_to_audit_dict(allotment),
    )

    await commit_or_rollback(session, "advance request")
    await session.refresh(allotment)
    logger.info("Advanced %d days on allotment %s", amount, allotment.id)
    return _build_allotment_response(allotment)
