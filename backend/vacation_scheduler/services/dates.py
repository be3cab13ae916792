"""Calendar arithmetic for vacation ranges and vacation years. No I/O."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta

_FRIDAY = 4
_SATURDAY = 5
_SUNDAY = 6


@dataclass(frozen=True)
class VacationPeriod:
    """A vacation year derived from a hire date."""

    label: str
    start: date
    end: date


def inclusive_day_count(start: date, end: date) -> int:
    """Number of calendar days in [start, end]. Caller must ensure start <= end."""
    return (end - start).days + 1


def is_friday(value: date) -> bool:
    return value.weekday() == _FRIDAY


def is_saturday(value: date) -> bool:
    return value.weekday() == _SATURDAY


def is_sunday(value: date) -> bool:
    return value.weekday() == _SUNDAY


def is_weekend(value: date) -> bool:
    return value.weekday() >= _SATURDAY


def friday_extended_sunday(value: date) -> date:
    """The Sunday that closes the weekend following a Friday."""
    return value + timedelta(days=2)


def extend_through_weekend(start: date, end: date) -> date:
    """Return the end date with the Friday rule applied.

    An end on a Friday runs through the following Sunday. A start on a
    Friday guarantees the range reaches at least that Sunday.
    """
    if is_friday(end):
        return friday_extended_sunday(end)
    if is_friday(start):
        return max(end, friday_extended_sunday(start))
    return end


def add_years(value: date, years: int) -> date:
    """Shift by whole years, clamping Feb 29 to Feb 28 in non-leap years."""
    year = value.year + years
    _, days_in_month = monthrange(year, value.month)
    return date(year, value.month, min(value.day, days_in_month))


def vacation_period(hire_date: date) -> VacationPeriod:
    """The first vacation year opens one year after hire and lasts one year."""
    start = add_years(hire_date, 1)
    end = add_years(start, 1)
    return VacationPeriod(label=f"{start.year}-{end.year}", start=start, end=end)


def whole_months_elapsed(period_start: date, now: date) -> int:
    """Complete calendar months from period_start to now; 0 if now <= period_start."""
    if now <= period_start:
        return 0
    months = (now.year - period_start.year) * 12 + (now.month - period_start.month)
    if now.day < period_start.day:
        # Ending on the last day of a short month completes the month only
        # for a one-month span (Jan 31 -> Feb 28 is 1, Jan 31 -> Apr 30 is 2).
        _, days_in_month = monthrange(now.year, now.month)
        if months != 1 or now.day != days_in_month:
            months -= 1
    return max(months, 0)


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Closed-interval overlap test; symmetric in its two intervals."""
    return a_start <= b_end and b_start <= a_end
