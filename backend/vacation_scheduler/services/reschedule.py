"""Reschedule engine: retire active ranges and replace them with new ones.

Two modes:

- MERGE: K selected ranges become exactly one new range.
- PRESERVE_COUNT: each selected range gets its own replacement.

Planning is pure (``plan_merge`` / ``plan_preserve``); the async entry
points lock the allotment, plan, and commit every status change, new range
and pool counter in one transaction.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from vacation_scheduler.config import get_settings
from vacation_scheduler.db import commit_or_rollback, flush_or_rollback
from vacation_scheduler.exceptions import CapacityError, NotFoundError, RangeValidationError, StateError
from vacation_scheduler.models.enums import (
    AuditAction,
    AuditEntityType,
    LeftoverPool,
    RangeKind,
    RangeStatus,
    RescheduleMode,
)
from vacation_scheduler.schemas.range import RangeDraft
from vacation_scheduler.schemas.reschedule import RescheduleResponse
from vacation_scheduler.services.allotment import (
    PoolUsage,
    _build_allotment_response,
    _get_allotment_or_404,
    _load_ranges,
    classify_days,
)
from vacation_scheduler.services.audit import model_to_audit_dict, write_audit_log
from vacation_scheduler.services.clock import get_clock
from vacation_scheduler.services.dates import extend_through_weekend, inclusive_day_count, is_friday
from vacation_scheduler.services.overlap import DateInterval, find_overlap
from vacation_scheduler.services.ranges import _build_range_response, _materialize
from vacation_scheduler.services.validation import check_date_order, check_period_bounds, format_range

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from vacation_scheduler.models.allotment import VacationAllotment
    from vacation_scheduler.models.range import VacationRange
    from vacation_scheduler.schemas.reschedule import MergeReschedulePayload, PreserveReschedulePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Plan types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReplacementSpec:
    """A new range to create, with the sources it supersedes."""

    source_ids: tuple[uuid.UUID, ...]
    start_date: date
    end_date: date
    requested_days: int
    kind: RangeKind
    includes_weekend_extension: bool
    is_advance: bool = False


@dataclass
class ReschedulePlan:
    """Everything a reschedule will commit."""

    mode: RescheduleMode
    sources: list[VacationRange]
    replacements: list[ReplacementSpec]
    usage: PoolUsage
    leftover_days: int = 0
    leftover_pool: LeftoverPool = LeftoverPool.NONE
    source_days: int = field(init=False)

    def __post_init__(self) -> None:
        self.source_days = sum(r.requested_days for r in self.sources)


# ---------------------------------------------------------------------------
# Pure planning helpers (no DB)
# ---------------------------------------------------------------------------


def is_reschedulable(vacation_range: VacationRange, today: date) -> bool:
    """Only active ranges that start strictly after today can be rescheduled."""
    return vacation_range.status == RangeStatus.ACTIVE and vacation_range.start_date > today


def _select_sources(
    ranges: Sequence[VacationRange],
    source_ids: Sequence[uuid.UUID],
    today: date,
    max_sources: int | None,
) -> list[VacationRange]:
    if not source_ids:
        raise RangeValidationError(["Select at least one range to reschedule"])
    if len(set(source_ids)) != len(source_ids):
        raise RangeValidationError(["A range can only be selected once"])
    if max_sources is None:
        max_sources = get_settings().max_reschedule_sources
    if len(source_ids) > max_sources:
        raise RangeValidationError([f"At most {max_sources} ranges can be rescheduled at once"])

    by_id = {r.id: r for r in ranges}
    sources: list[VacationRange] = []
    for source_id in source_ids:
        source = by_id.get(source_id)
        if source is None:
            raise NotFoundError(f"Range {source_id} not found in this allotment")
        if source.status != RangeStatus.ACTIVE:
            raise StateError(f"Range {format_range(source.start_date, source.end_date)} was already rescheduled")
        if not is_reschedulable(source, today):
            raise StateError(
                f"Range {format_range(source.start_date, source.end_date)} has already started "
                "and can no longer be rescheduled"
            )
        sources.append(source)
    return sources


def _resolve_interval(start: date, end: date, allotment: VacationAllotment) -> tuple[date, int, bool]:
    """Check a replacement interval and return (normalized end, days, weekend flag)."""
    errors = check_date_order(start, end)
    if errors:
        raise RangeValidationError(errors)
    effective_end = extend_through_weekend(start, end)
    errors = check_period_bounds(start, effective_end, allotment)
    if errors:
        raise RangeValidationError(errors)
    return effective_end, inclusive_day_count(start, effective_end), is_friday(start) or is_friday(end)


def _check_no_overlap(
    candidates: Sequence[DateInterval],
    ranges: Sequence[VacationRange],
    sources: Sequence[VacationRange],
) -> None:
    conflict = find_overlap(candidates, ranges, exclude_ids=[s.id for s in sources])
    if conflict is not None:
        raise RangeValidationError(
            [f"Overlap detected with the range {format_range(conflict.start_date, conflict.end_date)}"]
        )


def _bank_leftover(usage: PoolUsage, leftover: int, allotment: VacationAllotment) -> LeftoverPool:
    """Account leftover days: flexible used counter if it fits, else block used counter."""
    if leftover <= 0:
        return LeftoverPool.NONE
    if usage.flexible_used + leftover <= allotment.flexible_days_available:
        usage.flexible_used += leftover
        return LeftoverPool.FLEXIBLE
    banked = usage.block_used + leftover
    if banked > allotment.block_days_available:
        logger.warning(
            "Leftover of %d days exceeds block pool on allotment %s; clamping used counter at %d",
            leftover,
            allotment.id,
            allotment.block_days_available,
        )
        banked = allotment.block_days_available
    usage.block_used = banked
    return LeftoverPool.BLOCK


def _recompute_pools(plan: ReschedulePlan, allotment: VacationAllotment) -> None:
    for source in plan.sources:
        plan.usage.subtract(source.kind, source.requested_days)
    for spec in plan.replacements:
        plan.usage.add(spec.kind, spec.requested_days)
    plan.usage.check_within(allotment)

    plan.leftover_days = plan.source_days - sum(s.requested_days for s in plan.replacements)
    plan.leftover_pool = _bank_leftover(plan.usage, plan.leftover_days, allotment)


def plan_merge(
    allotment: VacationAllotment,
    ranges: Sequence[VacationRange],
    source_ids: Sequence[uuid.UUID],
    start_date: date,
    end_date: date,
    today: date,
    *,
    max_sources: int | None = None,
    flexible_max: int | None = None,
) -> ReschedulePlan:
    """Plan the replacement of the selected ranges by a single new range."""
    sources = _select_sources(ranges, source_ids, today, max_sources)
    effective_end, requested_days, weekend = _resolve_interval(start_date, end_date, allotment)

    source_days = sum(s.requested_days for s in sources)
    if requested_days > source_days:
        raise CapacityError(
            f"Requested days ({requested_days}) exceed the days available "
            f"from the selected ranges ({source_days})"
        )

    _check_no_overlap([DateInterval(start_date, effective_end)], ranges, sources)

    kind = classify_days(requested_days, flexible_max)
    source_kinds = {RangeKind(s.kind) for s in sources}
    if source_kinds == {RangeKind.FLEXIBLE, RangeKind.BLOCK}:
        kind = RangeKind.BLOCK

    plan = ReschedulePlan(
        mode=RescheduleMode.MERGE,
        sources=sources,
        replacements=[
            ReplacementSpec(
                source_ids=tuple(s.id for s in sources),
                start_date=start_date,
                end_date=effective_end,
                requested_days=requested_days,
                kind=kind,
                includes_weekend_extension=weekend,
            )
        ],
        usage=PoolUsage.of(allotment),
    )
    _recompute_pools(plan, allotment)
    return plan


def plan_preserve(
    allotment: VacationAllotment,
    ranges: Sequence[VacationRange],
    replacements: Sequence[tuple[uuid.UUID, date, date]],
    today: date,
    *,
    max_sources: int | None = None,
    flexible_max: int | None = None,
) -> ReschedulePlan:
    """Plan a one-to-one replacement of each selected range.

    replacements holds (source_id, start_date, end_date) per selected range.
    Each replacement keeps its source's advance flag; merged ranges never do.
    """
    sources = _select_sources(ranges, [r[0] for r in replacements], today, max_sources)
    by_id = {s.id: s for s in sources}

    specs: list[ReplacementSpec] = []
    for source_id, start, end in replacements:
        effective_end, requested_days, weekend = _resolve_interval(start, end, allotment)
        specs.append(
            ReplacementSpec(
                source_ids=(source_id,),
                start_date=start,
                end_date=effective_end,
                requested_days=requested_days,
                kind=classify_days(requested_days, flexible_max),
                includes_weekend_extension=weekend,
                is_advance=by_id[source_id].is_advance,
            )
        )

    _check_no_overlap([DateInterval(s.start_date, s.end_date) for s in specs], ranges, sources)

    source_days = sum(s.requested_days for s in sources)
    new_days = sum(s.requested_days for s in specs)
    if new_days > source_days:
        raise CapacityError(
            f"The new ranges add up to {new_days} days, more than the {source_days} days "
            "of the selected ranges"
        )

    plan = ReschedulePlan(
        mode=RescheduleMode.PRESERVE_COUNT,
        sources=sources,
        replacements=specs,
        usage=PoolUsage.of(allotment),
    )
    _recompute_pools(plan, allotment)
    return plan


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


async def _commit_plan(
    session: AsyncSession,
    allotment: VacationAllotment,
    plan: ReschedulePlan,
) -> RescheduleResponse:
    """Apply a plan atomically: new ranges, retired sources, pool counters, audit."""
    before_dict = model_to_audit_dict(allotment)

    created: list[VacationRange] = []
    new_id_by_source: dict[uuid.UUID, uuid.UUID] = {}
    for spec in plan.replacements:
        draft = RangeDraft(
            allotment_id=allotment.id,
            employee_id=allotment.employee_id,
            start_date=spec.start_date,
            end_date=spec.end_date,
            requested_days=spec.requested_days,
            kind=spec.kind,
            includes_weekend_extension=spec.includes_weekend_extension,
            is_advance=spec.is_advance,
            rescheduled_from=list(spec.source_ids),
        )
        new_range = _materialize(draft)
        session.add(new_range)
        created.append(new_range)
        for source_id in spec.source_ids:
            new_id_by_source[source_id] = new_range.id

    for source in plan.sources:
        source.status = RangeStatus.RESCHEDULED.value
        source.rescheduled_to = new_id_by_source[source.id]

    plan.usage.apply_to(allotment)
    await flush_or_rollback(session, "reschedule")

    await write_audit_log(
        session,
        employee_id=allotment.employee_id,
        entity_type=AuditEntityType.ALLOTMENT,
        entity_id=allotment.id,
        action=AuditAction.RESCHEDULE,
        before_json=before_dict,
        after_json={
            **model_to_audit_dict(allotment),
            "mode": plan.mode.value,
            "mappings": [
                {"original_range_id": str(source_id), "new_range_id": str(new_id)}
                for source_id, new_id in new_id_by_source.items()
            ],
            "leftover_days": plan.leftover_days,
            "leftover_pool": plan.leftover_pool.value,
        },
    )

    await commit_or_rollback(session, "reschedule")
    for vacation_range in (*plan.sources, *created):
        await session.refresh(vacation_range)
    await session.refresh(allotment)

    logger.info(
        "Rescheduled %d range(s) into %d on allotment %s (%s, leftover %d -> %s)",
        len(plan.sources),
        len(created),
        allotment.id,
        plan.mode,
        plan.leftover_days,
        plan.leftover_pool,
    )
    return RescheduleResponse(
        mode=plan.mode,
        retired=[_build_range_response(r) for r in plan.sources],
        created=[_build_range_response(r) for r in created],
        leftover_days=plan.leftover_days,
        leftover_pool=plan.leftover_pool,
        allotment=_build_allotment_response(allotment),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def reschedule_merge(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    payload: MergeReschedulePayload,
) -> RescheduleResponse:
    """Combine the selected ranges into one new range."""
    allotment = await _get_allotment_or_404(session, allotment_id, for_update=True)
    ranges = await _load_ranges(session, allotment_id)
    plan = plan_merge(
        allotment,
        ranges,
        payload.source_range_ids,
        payload.start_date,
        payload.end_date,
        get_clock().today(),
    )
    return await _commit_plan(session, allotment, plan)


async def reschedule_preserve(
    session: AsyncSession,
    allotment_id: uuid.UUID,
    payload: PreserveReschedulePayload,
) -> RescheduleResponse:
    """Give each selected range its own replacement dates."""
    allotment = await _get_allotment_or_404(session, allotment_id, for_update=True)
    ranges = await _load_ranges(session, allotment_id)
    plan = plan_preserve(
        allotment,
        ranges,
        [(r.source_range_id, r.start_date, r.end_date) for r in payload.replacements],
        get_clock().today(),
    )
    return await _commit_plan(session, allotment, plan)
