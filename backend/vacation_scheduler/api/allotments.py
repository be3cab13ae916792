# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from vacation_scheduler.db import SessionDep
from vacation_scheduler.schemas.allotment import (
    AdvanceAvailabilityResponse,
    AdvanceRequestPayload,
    AllotmentListResponse,
    AllotmentResponse,
    AllotmentSummaryResponse,
    UpdateAllotmentStatusPayload,
)
from vacation_scheduler.services import advance as advance_service
from vacation_scheduler.services import allotment as allotment_service

employee_allotments_router = APIRouter(prefix="/employees/{employee_id}/allotments", tags=["allotments"])

allotments_router = APIRouter(prefix="/allotments", tags=["allotments"])


@employee_allotments_router.post("", response_model=AllotmentResponse, status_code=status.HTTP_201_CREATED)
async def open_allotment(employee_id: uuid.UUID, session: SessionDep) -> AllotmentResponse:
    """Open the employee's vacation year (idempotent)."""
    return await allotment_service.open_allotment(session, employee_id)


@employee_allotments_router.get("", response_model=AllotmentListResponse)
async def list_employee_allotments(
    employee_id: uuid.UUID,
    session: SessionDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AllotmentListResponse:
    """List the allotments of one employee."""
    return await allotment_service.list_allotments(session, employee_id, offset, limit)


@allotments_router.get("", response_model=AllotmentListResponse)
async def list_allotments(
    session: SessionDep,
    employee_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AllotmentListResponse:
    """List allotments with an optional employee filter."""
    return await allotment_service.list_allotments(session, employee_id, offset, limit)


@allotments_router.get("/{allotment_id}", response_model=AllotmentResponse)
async def get_allotment(allotment_id: uuid.UUID, session: SessionDep) -> AllotmentResponse:
    """Get a single allotment."""
    return await allotment_service.get_allotment(session, allotment_id)


@allotments_router.get("/{allotment_id}/summary", response_model=AllotmentSummaryResponse)
async def get_allotment_summary(allotment_id: uuid.UUID, session: SessionDep) -> AllotmentSummaryResponse:
    """Get counters with remaining days and advance availability."""
    return await allotment_service.get_allotment_summary(session, allotment_id)


@allotments_router.patch("/{allotment_id}/status", response_model=AllotmentResponse)
async def set_allotment_status(
    allotment_id: uuid.UUID,
    payload: UpdateAllotmentStatusPayload,
    session: SessionDep,
) -> AllotmentResponse:
    """Change the administrative status of an allotment."""
    return await allotment_service.set_allotment_status(session, allotment_id, payload.status)


@allotments_router.get("/{allotment_id}/advance", response_model=AdvanceAvailabilityResponse)
async def get_advance_availability(allotment_id: uuid.UUID, session: SessionDep) -> AdvanceAvailabilityResponse:
    """Advance days earned so far in the period."""
    return await advance_service.get_advance_availability(session, allotment_id)


@allotments_router.post("/{allotment_id}/advance", response_model=AllotmentResponse)
async def request_advance(
    allotment_id: uuid.UUID,
    payload: AdvanceRequestPayload,
    session: SessionDep,
) -> AllotmentResponse:
    """Borrow advance days into the block pool."""
    return await advance_service.request_advance(session, allotment_id, payload.amount)
