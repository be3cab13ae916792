"""Business rules for a candidate vacation range.

Pure decision logic: takes the allotment and its ranges as already loaded
and reports every rule the candidate breaks. Nothing here touches the store.
"""

# ruff: noqa: TC003
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from vacation_scheduler.config import get_settings
from vacation_scheduler.models.enums import RangeKind
from vacation_scheduler.services.allotment import classify_days, remaining
from vacation_scheduler.services.dates import (
    extend_through_weekend,
    inclusive_day_count,
    is_friday,
    is_saturday,
    is_sunday,
)
from vacation_scheduler.services.overlap import DateInterval, find_overlap

if TYPE_CHECKING:
    from vacation_scheduler.models.allotment import VacationAllotment
    from vacation_scheduler.models.range import VacationRange

_DATE_FORMAT = "%d/%m/%Y"


@dataclass
class RangeValidation:
    """Outcome of validating one candidate range.

    end_date is the normalized end (Friday rule applied); requested_days and
    kind are None when the dates are out of order.
    """

    start_date: date
    end_date: date
    requested_days: int | None = None
    kind: RangeKind | None = None
    includes_weekend_extension: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def format_range(start: date, end: date) -> str:
    """Human-readable dd/mm/yyyy span used in messages."""
    return f"{start.strftime(_DATE_FORMAT)} - {end.strftime(_DATE_FORMAT)}"


def check_period_bounds(start: date, end: date, allotment: VacationAllotment) -> list[str]:
    """Each boundary must fall inside the allotment's vacation year."""
    errors: list[str] = []
    period = format_range(allotment.period_start, allotment.period_end)
    if not allotment.period_start <= start <= allotment.period_end:
        errors.append(f"The start date must fall within the vacation period {period}")
    if not allotment.period_start <= end <= allotment.period_end:
        errors.append(f"The end date must fall within the vacation period {period}")
    return errors


def check_date_order(start: date, end: date) -> list[str]:
    if start > end:
        return ["The start date cannot be after the end date"]
    return []


def validate_range(
    start_date: date,
    end_date: date,
    allotment: VacationAllotment,
    ranges: Sequence[VacationRange],
    *,
    is_new: bool = True,
    flexible_max: int | None = None,
) -> RangeValidation:
    """Validate candidate dates against the allotment.

    All applicable errors are accumulated. Warnings never affect validity.
    The overlap scan is skipped when is_new is False (the caller checks
    overlap itself, excluding the ranges being replaced).
    """
    if flexible_max is None:
        flexible_max = get_settings().flexible_range_max_days
    effective_end = extend_through_weekend(start_date, end_date) if start_date <= end_date else end_date
    result = RangeValidation(start_date=start_date, end_date=effective_end)

    # 1-2. Period bounds and date order.
    result.errors.extend(check_period_bounds(start_date, effective_end, allotment))
    result.errors.extend(check_date_order(start_date, end_date))

    # 3. A range may include a weekend but never begin on one.
    if is_saturday(start_date) or is_sunday(start_date):
        result.errors.append("A vacation range cannot start on a weekend (Saturday or Sunday)")

    # 4-5. Friday rule.
    result.includes_weekend_extension = is_friday(start_date) or is_friday(end_date)
    if is_friday(start_date):
        result.warnings.append("Starting on a Friday automatically includes Saturday and Sunday")
    if is_friday(end_date):
        result.warnings.append("Ending on a Friday automatically extends the range through Sunday")

    if start_date > end_date:
        return result

    requested_days = inclusive_day_count(start_date, effective_end)
    kind = classify_days(requested_days, flexible_max)
    result.requested_days = requested_days
    result.kind = kind

    # 6. Pool consumption.
    left = remaining(allotment)
    if kind == RangeKind.FLEXIBLE:
        if left.flexible == 0:
            result.errors.append(
                f"All {allotment.flexible_days_available} flexible days have been used; "
                f"the remaining days must be requested in blocks of more than {flexible_max} days"
            )
        elif requested_days > left.flexible:
            result.errors.append(f"Only {left.flexible} flexible days remain available")
        if left.flexible > 0 and left.flexible - requested_days == 0:
            result.warnings.append(
                f"This range completes your {allotment.flexible_days_available} flexible days; "
                "the remaining days must be requested as block ranges"
            )
    elif requested_days > left.block:
        result.errors.append(f"Only {left.block} block days remain available")

    # 7. Overlap with booked ranges.
    if is_new:
        conflict = find_overlap([DateInterval(start_date, effective_end)], ranges)
        if conflict is not None:
            result.errors.append(
                "This range overlaps vacation already booked for "
                f"{format_range(conflict.start_date, conflict.end_date)}"
            )

    return result
