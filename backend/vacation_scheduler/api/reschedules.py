# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from vacation_scheduler.db import SessionDep
from vacation_scheduler.schemas.reschedule import (
    MergeReschedulePayload,
    PreserveReschedulePayload,
    RescheduleResponse,
)
from vacation_scheduler.services import reschedule as reschedule_service

reschedules_router = APIRouter(prefix="/allotments/{allotment_id}/reschedules", tags=["reschedules"])


@reschedules_router.post("/merge", response_model=RescheduleResponse)
async def reschedule_merge(
    allotment_id: uuid.UUID,
    payload: MergeReschedulePayload,
    session: SessionDep,
) -> RescheduleResponse:
    """Replace the selected ranges with a single new range."""
    return await reschedule_service.reschedule_merge(session, allotment_id, payload)


@reschedules_router.post("/preserve", response_model=RescheduleResponse)
async def reschedule_preserve(
    allotment_id: uuid.UUID,
    payload: PreserveReschedulePayload,
    session: SessionDep,
) -> RescheduleResponse:
    """Replace each selected range with its own new range."""
    return await reschedule_service.reschedule_preserve(session, allotment_id, payload)
