"""Overlap detection between candidate intervals and booked ranges. No I/O."""

# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from vacation_scheduler.models.enums import RangeStatus
from vacation_scheduler.services.dates import intervals_overlap

if TYPE_CHECKING:
    from vacation_scheduler.models.range import VacationRange


@dataclass(frozen=True)
class DateInterval:
    """A closed calendar interval [start, end]."""

    start: date
    end: date


def find_overlap(
    candidates: Iterable[DateInterval],
    ranges: Sequence[VacationRange],
    exclude_ids: Collection[uuid.UUID] = (),
) -> VacationRange | None:
    """Return the first active range that shares a day with any candidate.

    Rescheduled ranges and ranges listed in exclude_ids are ignored. Ranges
    are scanned in the order given, candidates one at a time.
    """
    excluded = set(exclude_ids)
    for candidate in candidates:
        for existing in ranges:
            if existing.id in excluded or existing.status != RangeStatus.ACTIVE:
                continue
            if intervals_overlap(candidate.start, candidate.end, existing.start_date, existing.end_date):
                return existing
    return None
