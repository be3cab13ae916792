# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from vacation_scheduler.config import get_settings
from vacation_scheduler.db import commit_or_rollback, flush_or_rollback
from vacation_scheduler.exceptions import NotFoundError, RangeValidationError, StateError
from vacation_scheduler.models.enums import AuditAction, AuditEntityType, RangeKind, RangeStatus
from vacation_scheduler.models.range import VacationRange
from vacation_scheduler.schemas.range import (
    BulkExternalDocumentResponse,
    RangeDraft,
    RangeListResponse,
    RangeResponse,
    RangeValidationResponse,
)
from vacation_scheduler.services.allotment import PoolUsage, _get_allotment_or_404, _load_ranges
from vacation_scheduler.services.audit import model_to_audit_dict, write_audit_log
from vacation_scheduler.services.clock import get_clock
from vacation_scheduler.services.validation import validate_range

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from vacation_scheduler.models.allotment import VacationAllotment
    from vacation_scheduler.schemas.range import CreateRangePayload, RangeDatesPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_range_response(vacation_range: VacationRange) -> RangeResponse:
    """Map a range model to its response schema."""
    return RangeResponse(
        id=vacation_range.id,
        allotment_id=vacation_range.allotment_id,
        employee_id=vacation_range.employee_id,
        start_date=vacation_range.start_date,
        end_date=vacation_range.end_date,
        requested_days=vacation_range.requested_days,
        kind=RangeKind(vacation_range.kind),
        includes_weekend_extension=vacation_range.includes_weekend_extension,
        status=RangeStatus(vacation_range.status),
        is_advance=vacation_range.is_advance,
        rescheduled_from=[uuid.UUID(str(i)) for i in vacation_range.rescheduled_from or []],
        rescheduled_to=vacation_range.rescheduled_to,
        external_document_id=vacation_range.external_document_id,
        created_at=vacation_range.created_at,
    )


def _materialize(draft: RangeDraft) -> VacationRange:
    """Turn a validated draft into an active range row."""
    return VacationRange(
        allotment_id=draft.allotment_id,
        employee_id=draft.employee_id,
        start_date=draft.start_date,
        end_date=draft.end_date,
        requested_days=draft.requested_days,
        kind=draft.kind.value,
        includes_weekend_extension=draft.includes_weekend_extension,
        status=RangeStatus.ACTIVE.value,
        is_advance=draft.is_advance,
        rescheduled_from=[str(i) for i in draft.rescheduled_from],
        external_document_id=draft.external_document_id,
    )


async def _get_range_or_404(
    session: AsyncSession,
    range_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> VacationRange:
    """Fetch a range by ID. Raises 404 if not found."""
    query = select(VacationRange).where(col(VacationRange.id) == range_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    vacation_range = result.scalar_one_or_none()
    if vacation_range is None:
        raise NotFoundError("Range not found")
    return vacation_range


def _reverse_advance(allotment: VacationAllotment, days: int) -> None:
    """Undo the borrowed-day bookkeeping of a deleted advance range."""
    base_total = get_settings().base_total_days
    allotment.advance_days_used = max(0, allotment.advance_days_used - days)
    if allotment.advance_days_used == 0:
        allotment.total_days = base_total
    else:
        allotment.total_days = max(base_total, allotment.total_days - days)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def preview_range(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    payload: RangeDatesPayload,
) -> RangeValidationResponse:
    """Validate candidate dates without booking them."""
    allotment = await _get_allotment_or_404(session, allotment_id)
    ranges = await _load_ranges(session, allotment_id)
    validation = validate_range(payload.start_date, payload.end_date, allotment, ranges)
    return RangeValidationResponse(
        is_valid=validation.is_valid,
        errors=validation.errors,
        warnings=validation.warnings,
        start_date=validation.start_date,
        end_date=validation.end_date,
        requested_days=validation.requested_days,
        kind=validation.kind,
        includes_weekend_extension=validation.includes_weekend_extension,
    )


async def create_range(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    payload: CreateRangePayload,
) -> RangeResponse:
    """Book a new vacation range.

    Flow:
    1. Lock the allotment row.
    2. Validate dates, pools and overlap against the active ranges.
    3. Build the range through RangeDraft.
    4. Add its days to the pool of its kind.
    5. Audit log and commit.
    """
    allotment = await _get_allotment_or_404(session, allotment_id, for_update=True)
    ranges = await _load_ranges(session, allotment_id)

    validation = validate_range(payload.start_date, payload.end_date, allotment, ranges)
    if not validation.is_valid or validation.requested_days is None or validation.kind is None:
        raise RangeValidationError(validation.errors, validation.warnings)

    draft = RangeDraft(
        allotment_id=allotment.id,
        employee_id=allotment.employee_id,
        start_date=validation.start_date,
        end_date=validation.end_date,
        requested_days=validation.requested_days,
        kind=validation.kind,
        includes_weekend_extension=validation.includes_weekend_extension,
        is_advance=payload.is_advance,
        external_document_id=payload.external_document_id,
    )
    vacation_range = _materialize(draft)

    usage = PoolUsage.of(allotment)
    usage.add(draft.kind, draft.requested_days)
    usage.check_within(allotment)
    usage.apply_to(allotment)

    session.add(vacation_range)
    await flush_or_rollback(session, "vacation range")

    await write_audit_log(
        session,
        employee_id=allotment.employee_id,
        entity_type=AuditEntityType.RANGE,
        entity_id=vacation_range.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(vacation_range),
    )

    await commit_or_rollback(session, "vacation range")
    await session.refresh(vacation_range)
    logger.info(
        "Booked %s range %s (%d days) on allotment %s",
        draft.kind,
        vacation_range.id,
        draft.requested_days,
        allotment.id,
    )
    return _build_range_response(vacation_range)


async def delete_range(session: AsyncSession, range_id: uuid.UUID) -> None:
    """Remove an active range and give its days back to its pool.

    Advance ranges also reverse their borrowed-day bookkeeping. Rescheduled
    ranges are part of the lineage and cannot be deleted.
    """
    vacation_range = await _get_range_or_404(session, range_id)
    # Allotment row first, then the range, the same order reschedules lock in.
    allotment = await _get_allotment_or_404(session, vacation_range.allotment_id, for_update=True)
    vacation_range = await _get_range_or_404(session, range_id, for_update=True)
    if vacation_range.status != RangeStatus.ACTIVE:
        raise StateError("Rescheduled ranges cannot be deleted")

    before_dict = model_to_audit_dict(vacation_range)

    usage = PoolUsage.of(allotment)
    usage.subtract(vacation_range.kind, vacation_range.requested_days)
    usage.check_within(allotment)
    usage.apply_to(allotment)
    if vacation_range.is_advance:
        _reverse_advance(allotment, vacation_range.requested_days)

    await session.delete(vacation_range)
    await flush_or_rollback(session, "range deletion")

    await write_audit_log(
        session,
        employee_id=allotment.employee_id,
        entity_type=AuditEntityType.RANGE,
        entity_id=range_id,
        action=AuditAction.DELETE,
        before_json=before_dict,
    )

    await commit_or_rollback(session, "range deletion")
    logger.info("Deleted range %s from allotment %s", range_id, allotment.id)


async def get_range(session: AsyncSession, range_id: uuid.UUID) -> RangeResponse:
    """Get a single range by ID."""
    vacation_range = await _get_range_or_404(session, range_id)
    return _build_range_response(vacation_range)


async def list_ranges(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    status_filter: RangeStatus | None = None,
) -> RangeListResponse:
    """List the ranges of an allotment in booking order."""
    await _get_allotment_or_404(session, allotment_id)
    ranges = await _load_ranges(session, allotment_id, status_filter)
    return RangeListResponse(items=[_build_range_response(r) for r in ranges], total=len(ranges))


async def list_reschedulable_ranges(session: AsyncSession, allotment_id: uuid.UUID) -> RangeListResponse:
    """Active ranges that have not started yet."""
    from vacation_scheduler.services.reschedule import is_reschedulable

    await _get_allotment_or_404(session, allotment_id)
    today = get_clock().today()
    ranges = [
        r for r in await _load_ranges(session, allotment_id, RangeStatus.ACTIVE) if is_reschedulable(r, today)
    ]
    return RangeListResponse(items=[_build_range_response(r) for r in ranges], total=len(ranges))


async def set_external_document(
    session: AsyncSession,
    range_id: uuid.UUID,
    external_document_id: str | None,
) -> RangeResponse:
    """Link a range to an administrative document, or unlink it with None."""
    vacation_range = await _get_range_or_404(session, range_id, for_update=True)
    before_dict = model_to_audit_dict(vacation_range)

    vacation_range.external_document_id = external_document_id
    await flush_or_rollback(session, "external document link")

    await write_audit_log(
        session,
        employee_id=vacation_range.employee_id,
        entity_type=AuditEntityType.RANGE,
        entity_id=vacation_range.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(vacation_range),
    )

    await commit_or_rollback(session, "external document link")
    await session.refresh(vacation_range)
    return _build_range_response(vacation_range)


async def assign_external_document(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    external_document_id: str,
) -> BulkExternalDocumentResponse:
    """Link one document to every active range of the allotment that has none."""
    allotment = await _get_allotment_or_404(session, allotment_id)
    ranges = await _load_ranges(session, allotment_id, RangeStatus.ACTIVE)

    updated = 0
    for vacation_range in ranges:
        if vacation_range.external_document_id:
            continue
        before_dict = model_to_audit_dict(vacation_range)
        vacation_range.external_document_id = external_document_id
        await flush_or_rollback(session, "external document links")
        await write_audit_log(
            session,
            employee_id=allotment.employee_id,
            entity_type=AuditEntityType.RANGE,
            entity_id=vacation_range.id,
            action=AuditAction.UPDATE,
            before_json=before_dict,
            after_json=model_to_audit_dict(vacation_range),
        )
        updated += 1

    await commit_or_rollback(session, "external document links")
    return BulkExternalDocumentResponse(updated=updated)
