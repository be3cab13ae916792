# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from vacation_scheduler.models.enums import RangeKind, RangeStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class RangeDatesPayload(BaseModel):
    """Candidate dates for a vacation range, as picked by the user."""

    start_date: date
    end_date: date


class CreateRangePayload(RangeDatesPayload):
    """Request body for booking a new vacation range."""

    is_advance: bool = False
    external_document_id: str | None = Field(default=None, max_length=255)


class ExternalDocumentPayload(BaseModel):
    """Request body for linking (or unlinking, with null) an external document."""

    external_document_id: str | None = Field(default=None, max_length=255)


class BulkExternalDocumentPayload(BaseModel):
    """Request body for linking one document to every unlinked active range."""

    external_document_id: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class RangeDraft(BaseModel):
    """Fully resolved range ready to be committed.

    The only way new ranges are built; rejects impossible shapes at
    construction instead of letting them reach the store.
    """

    allotment_id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    requested_days: int = Field(gt=0)
    kind: RangeKind
    includes_weekend_extension: bool = False
    is_advance: bool = False
    rescheduled_from: list[uuid.UUID] = Field(default_factory=list)
    external_document_id: str | None = None

    @model_validator(mode="after")
    def _validate_shape(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        if self.requested_days != (self.end_date - self.start_date).days + 1:
            msg = "requested_days must equal the inclusive day count"
            raise ValueError(msg)
        if len(set(self.rescheduled_from)) != len(self.rescheduled_from):
            msg = "rescheduled_from must not repeat a range"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RangeResponse(BaseModel):
    """Response schema for a single range."""

    id: uuid.UUID
    allotment_id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    requested_days: int
    kind: RangeKind
    includes_weekend_extension: bool
    status: RangeStatus
    is_advance: bool
    rescheduled_from: list[uuid.UUID]
    rescheduled_to: uuid.UUID | None
    external_document_id: str | None
    created_at: datetime


class RangeListResponse(BaseModel):
    """List of ranges of one allotment."""

    items: list[RangeResponse]
    total: int


class RangeValidationResponse(BaseModel):
    """Outcome of validating candidate dates without booking them."""

    is_valid: bool
    errors: list[str]
    warnings: list[str]
    start_date: date
    end_date: date
    requested_days: int | None
    kind: RangeKind | None
    includes_weekend_extension: bool


class BulkExternalDocumentResponse(BaseModel):
    """How many ranges received the document id."""

    updated: int
