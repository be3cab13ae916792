"""Tests for calendar arithmetic: day counts, the Friday rule, vacation years."""

from __future__ import annotations

from datetime import date

import pytest

from vacation_scheduler.services.dates import (
    add_years,
    extend_through_weekend,
    inclusive_day_count,
    intervals_overlap,
    is_friday,
    is_weekend,
    vacation_period,
    whole_months_elapsed,
)


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (date(2025, 2, 3), date(2025, 2, 3), 1),
        (date(2025, 2, 3), date(2025, 2, 5), 3),
        (date(2025, 2, 27), date(2025, 3, 2), 4),
        (date(2025, 12, 30), date(2026, 1, 2), 4),
    ],
)
def test_inclusive_day_count(start: date, end: date, expected: int) -> None:
    assert inclusive_day_count(start, end) == expected
    assert inclusive_day_count(start, end) == (end - start).days + 1


def test_weekday_predicates() -> None:
    assert is_friday(date(2025, 3, 7))
    assert not is_friday(date(2025, 3, 6))
    assert is_weekend(date(2025, 3, 8))
    assert is_weekend(date(2025, 3, 9))
    assert not is_weekend(date(2025, 3, 10))


# ---------------------------------------------------------------------------
# Friday rule
# ---------------------------------------------------------------------------


def test_end_on_friday_runs_through_sunday() -> None:
    assert extend_through_weekend(date(2025, 3, 3), date(2025, 3, 7)) == date(2025, 3, 9)


def test_single_friday_becomes_three_days() -> None:
    end = extend_through_weekend(date(2025, 3, 7), date(2025, 3, 7))
    assert end == date(2025, 3, 9)
    assert inclusive_day_count(date(2025, 3, 7), end) == 3


def test_start_on_friday_reaches_at_least_sunday() -> None:
    assert extend_through_weekend(date(2025, 3, 7), date(2025, 3, 8)) == date(2025, 3, 9)


def test_start_on_friday_keeps_later_end() -> None:
    assert extend_through_weekend(date(2025, 3, 7), date(2025, 3, 12)) == date(2025, 3, 12)


def test_no_friday_leaves_end_untouched() -> None:
    assert extend_through_weekend(date(2025, 3, 3), date(2025, 3, 6)) == date(2025, 3, 6)


# ---------------------------------------------------------------------------
# Vacation years
# ---------------------------------------------------------------------------


def test_vacation_period_from_hire_date() -> None:
    period = vacation_period(date(2024, 1, 10))
    assert period.start == date(2025, 1, 10)
    assert period.end == date(2026, 1, 10)
    assert period.label == "2025-2026"


def test_add_years_clamps_leap_day() -> None:
    assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
    assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (date(2025, 1, 10), 0),
        (date(2024, 12, 1), 0),
        (date(2025, 2, 9), 0),
        (date(2025, 2, 10), 1),
        (date(2025, 3, 9), 1),
        (date(2025, 3, 10), 2),
        (date(2026, 1, 10), 12),
    ],
)
def test_whole_months_elapsed(now: date, expected: int) -> None:
    assert whole_months_elapsed(date(2025, 1, 10), now) == expected


def test_whole_months_elapsed_month_end() -> None:
    assert whole_months_elapsed(date(2025, 1, 31), date(2025, 2, 28)) == 1
    assert whole_months_elapsed(date(2025, 1, 31), date(2025, 2, 27)) == 0
    assert whole_months_elapsed(date(2025, 1, 31), date(2025, 4, 30)) == 2
    assert whole_months_elapsed(date(2025, 1, 31), date(2025, 5, 31)) == 4


def test_intervals_overlap_touching_days() -> None:
    assert intervals_overlap(date(2025, 4, 1), date(2025, 4, 5), date(2025, 4, 5), date(2025, 4, 8))
    assert not intervals_overlap(date(2025, 4, 1), date(2025, 4, 5), date(2025, 4, 6), date(2025, 4, 8))
