# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Self

from pydantic import BaseModel, Field, model_validator

from vacation_scheduler.models.enums import LeftoverPool, RescheduleMode
from vacation_scheduler.schemas.allotment import AllotmentResponse
from vacation_scheduler.schemas.range import RangeResponse


class MergeReschedulePayload(BaseModel):
    """Replace the selected ranges with a single new range."""

    source_range_ids: list[uuid.UUID] = Field(min_length=1)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _validate_sources(self) -> Self:
        if len(set(self.source_range_ids)) != len(self.source_range_ids):
            msg = "source_range_ids must not repeat a range"
            raise ValueError(msg)
        return self


class Replacement(BaseModel):
    """New dates for one selected range."""

    source_range_id: uuid.UUID
    start_date: date
    end_date: date


class PreserveReschedulePayload(BaseModel):
    """Replace each selected range with its own new range."""

    replacements: list[Replacement] = Field(min_length=1)

    @model_validator(mode="after")
    def _validate_sources(self) -> Self:
        ids = [r.source_range_id for r in self.replacements]
        if len(set(ids)) != len(ids):
            msg = "each source range may be replaced only once"
            raise ValueError(msg)
        return self


class RescheduleResponse(BaseModel):
    """Result of a committed reschedule."""

    mode: RescheduleMode
    retired: list[RangeResponse]
    created: list[RangeResponse]
    leftover_days: int
    leftover_pool: LeftoverPool
    allotment: AllotmentResponse
