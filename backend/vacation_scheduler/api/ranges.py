# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from vacation_scheduler.db import SessionDep
from vacation_scheduler.models.enums import RangeStatus
from vacation_scheduler.schemas.range import (
    BulkExternalDocumentPayload,
    BulkExternalDocumentResponse,
    CreateRangePayload,
    ExternalDocumentPayload,
    RangeDatesPayload,
    RangeListResponse,
    RangeResponse,
    RangeValidationResponse,
)
from vacation_scheduler.services import ranges as range_service

allotment_ranges_router = APIRouter(prefix="/allotments/{allotment_id}/ranges", tags=["ranges"])

ranges_router = APIRouter(prefix="/ranges", tags=["ranges"])


@allotment_ranges_router.post("/validate", response_model=RangeValidationResponse)
async def validate_range(
    allotment_id: uuid.UUID,
    payload: RangeDatesPayload,
    session: SessionDep,
) -> RangeValidationResponse:
    """Check candidate dates without booking them."""
    return await range_service.preview_range(session, allotment_id, payload)


@allotment_ranges_router.post("", response_model=RangeResponse, status_code=status.HTTP_201_CREATED)
async def create_range(
    allotment_id: uuid.UUID,
    payload: CreateRangePayload,
    session: SessionDep,
) -> RangeResponse:
    """Book a new vacation range."""
    return await range_service.create_range(session, allotment_id, payload)


@allotment_ranges_router.get("", response_model=RangeListResponse)
async def list_ranges(
    allotment_id: uuid.UUID,
    session: SessionDep,
    status_filter: RangeStatus | None = Query(default=None, alias="status"),
) -> RangeListResponse:
    """List the ranges of an allotment."""
    return await range_service.list_ranges(session, allotment_id, status_filter)


@allotment_ranges_router.get("/reschedulable", response_model=RangeListResponse)
async def list_reschedulable_ranges(allotment_id: uuid.UUID, session: SessionDep) -> RangeListResponse:
    """List active ranges that have not started yet."""
    return await range_service.list_reschedulable_ranges(session, allotment_id)


@allotment_ranges_router.post("/external-document", response_model=BulkExternalDocumentResponse)
async def assign_external_document(
    allotment_id: uuid.UUID,
    payload: BulkExternalDocumentPayload,
    session: SessionDep,
) -> BulkExternalDocumentResponse:
    """Link a document to every active range that has none."""
    return await range_service.assign_external_document(session, allotment_id, payload.external_document_id)


@ranges_router.get("/{range_id}", response_model=RangeResponse)
async def get_range(range_id: uuid.UUID, session: SessionDep) -> RangeResponse:
    """Get a single range."""
    return await range_service.get_range(session, range_id)


@ranges_router.delete("/{range_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_range(range_id: uuid.UUID, session: SessionDep) -> None:
    """Delete an active range and release its days."""
    await range_service.delete_range(session, range_id)


@ranges_router.put("/{range_id}/external-document", response_model=RangeResponse)
async def set_external_document(
    range_id: uuid.UUID,
    payload: ExternalDocumentPayload,
    session: SessionDep,
) -> RangeResponse:
    """Link or unlink an external document."""
    return await range_service.set_external_document(session, range_id, payload.external_document_id)
