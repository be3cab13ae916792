# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col

from vacation_scheduler.config import get_settings
from vacation_scheduler.db import commit_or_rollback, flush_or_rollback
from vacation_scheduler.exceptions import CapacityError, NotFoundError, StoreError
from vacation_scheduler.models.allotment import VacationAllotment
from vacation_scheduler.models.enums import (
    AllotmentStatus,
    AuditAction,
    AuditEntityType,
    RangeKind,
    RangeStatus,
)
from vacation_scheduler.models.range import VacationRange
from vacation_scheduler.schemas.allotment import (
    AdvanceAvailabilityResponse,
    AllotmentListResponse,
    AllotmentResponse,
    AllotmentSummaryResponse,
    RemainingDaysResponse,
)
from vacation_scheduler.services.audit import model_to_audit_dict, write_audit_log
from vacation_scheduler.services.clock import get_clock
from vacation_scheduler.services.dates import vacation_period
from vacation_scheduler.services.employee import get_employee_service

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure derivations (no DB)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RemainingDays:
    """Bookable days per pool."""

    flexible: int
    block: int
    total: int


def remaining(allotment: VacationAllotment) -> RemainingDays:
    """Days left in each pool, clamped at zero."""
    flexible = max(0, allotment.flexible_days_available - allotment.flexible_days_used)
    block = max(0, allotment.block_days_available - allotment.block_days_used)
    return RemainingDays(flexible=flexible, block=block, total=flexible + block)


def classify_days(requested_days: int, flexible_max: int | None = None) -> RangeKind:
    """Short ranges draw from the flexible pool, longer ones from the block pool."""
    if flexible_max is None:
        flexible_max = get_settings().flexible_range_max_days
    return RangeKind.FLEXIBLE if requested_days <= flexible_max else RangeKind.BLOCK


@dataclass
class PoolUsage:
    """Working copy of the used counters while a mutation is being planned."""

    flexible_used: int
    block_used: int

    @classmethod
    def of(cls, allotment: VacationAllotment) -> PoolUsage:
        return cls(flexible_used=allotment.flexible_days_used, block_used=allotment.block_days_used)

    def add(self, kind: RangeKind | str, days: int) -> None:
        if kind == RangeKind.FLEXIBLE:
            self.flexible_used += days
        else:
            self.block_used += days

    def subtract(self, kind: RangeKind | str, days: int) -> None:
        self.add(kind, -days)

    def check_within(self, allotment: VacationAllotment) -> None:
        """Raise CapacityError unless both pools stay within their ceilings."""
        if self.flexible_used > allotment.flexible_days_available:
            raise CapacityError(
                f"Flexible pool would use {self.flexible_used} of "
                f"{allotment.flexible_days_available} available days"
            )
        if self.block_used > allotment.block_days_available:
            raise CapacityError(
                f"Block pool would use {self.block_used} of {allotment.block_days_available} available days"
            )
        if self.flexible_used < 0 or self.block_used < 0:
            raise CapacityError("Pool counters would become negative")

    def apply_to(self, allotment: VacationAllotment) -> None:
        allotment.flexible_days_used = self.flexible_used
        allotment.block_days_used = self.block_used
        allotment.version += 1


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_allotment_response(allotment: VacationAllotment) -> AllotmentResponse:
    """Map an allotment model to its response schema."""
    return AllotmentResponse(
        id=allotment.id,
        employee_id=allotment.employee_id,
        period_label=allotment.period_label,
        period_start=allotment.period_start,
        period_end=allotment.period_end,
        total_days=allotment.total_days,
        advance_days_used=allotment.advance_days_used,
        flexible_days_available=allotment.flexible_days_available,
        flexible_days_used=allotment.flexible_days_used,
        block_days_available=allotment.block_days_available,
        block_days_used=allotment.block_days_used,
        status=AllotmentStatus(allotment.status),
        created_at=allotment.created_at,
    )


async def _get_allotment_or_404(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> VacationAllotment:
    """Fetch an allotment by ID, optionally locking the row. Raises 404 if not found."""
    query = select(VacationAllotment).where(col(VacationAllotment.id) == allotment_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    allotment = result.scalar_one_or_none()
    if allotment is None:
        raise NotFoundError("Allotment not found")
    return allotment


async def _load_ranges(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    status_filter: RangeStatus | None = None,
) -> list[VacationRange]:
    """All ranges of an allotment in booking order."""
    query = select(VacationRange).where(col(VacationRange.allotment_id) == allotment_id)
    if status_filter is not None:
        query = query.where(col(VacationRange.status) == status_filter.value)
    result = await session.execute(
        query.order_by(col(VacationRange.created_at), col(VacationRange.start_date))
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def open_allotment(session: AsyncSession, employee_id: uuid.UUID) -> AllotmentResponse:
    """Open the employee's vacation year, or return it if already opened.

    The period is derived from the hire date held by the employee registry;
    pools start at the configured base sizes.
    """
    employee = await get_employee_service().get_employee(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    period = vacation_period(employee.hire_date)
    existing = await session.execute(
        select(VacationAllotment).where(
            col(VacationAllotment.employee_id) == employee_id,
            col(VacationAllotment.period_label) == period.label,
        )
    )
    allotment = existing.scalar_one_or_none()
    if allotment is not None:
        return _build_allotment_response(allotment)

    settings = get_settings()
    allotment = VacationAllotment(
        employee_id=employee_id,
        period_label=period.label,
        period_start=period.start,
        period_end=period.end,
        total_days=settings.base_total_days,
        flexible_days_available=settings.base_flexible_days,
        block_days_available=settings.base_block_days,
    )
    session.add(allotment)

    try:
        await session.flush()
    except IntegrityError:
        # Opened concurrently for the same period: return the winner.
        await session.rollback()
        result = await session.execute(
            select(VacationAllotment).where(
                col(VacationAllotment.employee_id) == employee_id,
                col(VacationAllotment.period_label) == period.label,
            )
        )
        return _build_allotment_response(result.scalar_one())
    except SQLAlchemyError as exc:
        logger.exception("Store rejected allotment")
        await session.rollback()
        raise StoreError("Could not persist allotment") from exc

    await write_audit_log(
        session,
        employee_id=employee_id,
        entity_type=AuditEntityType.ALLOTMENT,
        entity_id=allotment.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(allotment),
    )

    await commit_or_rollback(session, "allotment")
    await session.refresh(allotment)
    logger.info("Opened allotment %s for employee %s (%s)", allotment.id, employee_id, period.label)
    return _build_allotment_response(allotment)


async def get_allotment(session: AsyncSession, allotment_id: uuid.UUID) -> AllotmentResponse:
    """Get a single allotment by ID."""
    allotment = await _get_allotment_or_404(session, allotment_id)
    return _build_allotment_response(allotment)


async def list_allotments(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AllotmentListResponse:
    """List allotments, newest period first."""
    filters = []
    if employee_id is not None:
        filters.append(col(VacationAllotment.employee_id) == employee_id)

    count_result = await session.execute(select(func.count()).select_from(VacationAllotment).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(VacationAllotment)
        .where(*filters)
        .order_by(col(VacationAllotment.period_start).desc())
        .offset(offset)
        .limit(limit)
    )
    return AllotmentListResponse(
        items=[_build_allotment_response(a) for a in result.scalars().all()],
        total=total,
    )


async def get_allotment_summary(session: AsyncSession, allotment_id: uuid.UUID) -> AllotmentSummaryResponse:
    """Counters plus remaining days and advance availability as of today."""
    from vacation_scheduler.services.advance import advance_available

    allotment = await _get_allotment_or_404(session, allotment_id)
    active_ranges = await _load_ranges(session, allotment_id, RangeStatus.ACTIVE)

    left = remaining(allotment)
    available = advance_available(allotment.period_start, get_clock().today())
    return AllotmentSummaryResponse(
        allotment=_build_allotment_response(allotment),
        remaining=RemainingDaysResponse(flexible=left.flexible, block=left.block, total=left.total),
        advance=AdvanceAvailabilityResponse(
            available=available,
            used=allotment.advance_days_used,
            remaining=max(0.0, available - allotment.advance_days_used),
        ),
        active_ranges=len(active_ranges),
    )


async def set_allotment_status(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    status: AllotmentStatus,
) -> AllotmentResponse:
    """Change the administrative status. Does not affect booking rules."""
    allotment = await _get_allotment_or_404(session, allotment_id, for_update=True)
    before_dict = model_to_audit_dict(allotment)

    allotment.status = status.value
    await flush_or_rollback(session, "allotment status")

    await write_audit_log(
        session,
        employee_id=allotment.employee_id,
        entity_type=AuditEntityType.ALLOTMENT,
        entity_id=allotment.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(allotment),
    )

    await commit_or_rollback(session, "allotment status")
    await session.refresh(allotment)
    return _build_allotment_response(allotment)
