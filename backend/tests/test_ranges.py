"""Tests for booking, listing, deleting and linking vacation ranges."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from vacation_scheduler.exceptions import NotFoundError, RangeValidationError, StateError
from vacation_scheduler.models.audit import AuditLog
from vacation_scheduler.models.enums import AuditAction, RangeKind, RangeStatus
from vacation_scheduler.models.range import VacationRange
from vacation_scheduler.schemas.range import CreateRangePayload, RangeDatesPayload
from vacation_scheduler.schemas.reschedule import MergeReschedulePayload
from vacation_scheduler.services import advance as advance_service
from vacation_scheduler.services import allotment as allotment_service
from vacation_scheduler.services import ranges as range_service
from vacation_scheduler.services import reschedule as reschedule_service

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncEngine

    from vacation_scheduler.services.clock import FixedClock
    from vacation_scheduler.services.employee import EmployeeInfo


async def _open(session: AsyncSession, employee: EmployeeInfo) -> uuid.UUID:
    allotment = await allotment_service.open_allotment(session, employee.id)
    return allotment.id


def _payload(start: date, end: date, **kwargs: object) -> CreateRangePayload:
    return CreateRangePayload(start_date=start, end_date=end, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------------


async def test_create_flexible_range(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))

    assert created.requested_days == 3
    assert created.kind == RangeKind.FLEXIBLE
    assert created.status == RangeStatus.ACTIVE
    assert created.rescheduled_from == []
    assert created.rescheduled_to is None

    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.flexible_days_used == 3
    assert allotment.block_days_used == 0


async def test_create_friday_range_stores_normalized_end(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 3, 7), date(2025, 3, 7)))
    assert created.end_date == date(2025, 3, 9)
    assert created.requested_days == 3
    assert created.includes_weekend_extension


async def test_create_block_range(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 6, 9), date(2025, 6, 16)))
    assert created.kind == RangeKind.BLOCK

    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.block_days_used == 8
    assert allotment.flexible_days_used == 0


async def test_create_rejects_overlap(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    await range_service.create_range(db_session, allotment_id, _payload(date(2025, 4, 1), date(2025, 4, 5)))

    with pytest.raises(RangeValidationError) as exc_info:
        await range_service.create_range(db_session, allotment_id, _payload(date(2025, 4, 4), date(2025, 4, 10)))
    assert any("overlaps" in e for e in exc_info.value.errors)

    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.flexible_days_used == 5


async def test_create_rejects_flexible_shortfall(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))

    with pytest.raises(RangeValidationError, match="Only 4 flexible days remain available"):
        await range_service.create_range(db_session, allotment_id, _payload(date(2025, 6, 3), date(2025, 6, 7)))


async def test_create_writes_audit(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.entity_id) == created.id))
    entry = result.scalar_one()
    assert entry.action == AuditAction.CREATE
    assert entry.after_json is not None
    assert entry.after_json["requested_days"] == 3


async def test_preview_does_not_book(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    preview = await range_service.preview_range(
        db_session, allotment_id, RangeDatesPayload(start_date=date(2025, 3, 7), end_date=date(2025, 3, 7))
    )
    assert preview.is_valid
    assert preview.end_date == date(2025, 3, 9)
    assert len(preview.warnings) == 2

    listing = await range_service.list_ranges(db_session, allotment_id)
    assert listing.total == 0


async def test_pool_invariants_hold_after_bookings(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))
    await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 10), date(2025, 2, 13)))
    with pytest.raises(RangeValidationError):
        await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 17), date(2025, 2, 17)))
    await range_service.create_range(db_session, allotment_id, _payload(date(2025, 6, 9), date(2025, 6, 30)))

    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.flexible_days_used == 7
    assert allotment.block_days_used == 22
    assert allotment.flexible_days_used <= allotment.flexible_days_available
    assert allotment.block_days_used <= allotment.block_days_available


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


async def test_delete_restores_counters(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    before = await allotment_service.get_allotment(db_session, allotment_id)

    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 6, 9), date(2025, 6, 16)))
    await range_service.delete_range(db_session, created.id)

    after = await allotment_service.get_allotment(db_session, allotment_id)
    assert after.flexible_days_used == before.flexible_days_used
    assert after.block_days_used == before.block_days_used
    assert after.total_days == before.total_days

    with pytest.raises(NotFoundError):
        await range_service.get_range(db_session, created.id)


async def test_delete_advance_range_reverses_borrowing(
    db_session: AsyncSession,
    employee: EmployeeInfo,
    clock: FixedClock,
) -> None:
    allotment_id = await _open(db_session, employee)
    clock.current = date(2025, 3, 10)
    await advance_service.request_advance(db_session, allotment_id, 5)

    created = await range_service.create_range(
        db_session, allotment_id, _payload(date(2025, 4, 14), date(2025, 4, 21), is_advance=True)
    )
    assert created.is_advance

    await range_service.delete_range(db_session, created.id)
    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.advance_days_used == 0
    assert allotment.total_days == 30
    assert allotment.block_days_used == 0


async def test_delete_partial_advance_keeps_floor(
    db_session: AsyncSession,
    employee: EmployeeInfo,
    clock: FixedClock,
) -> None:
    allotment_id = await _open(db_session, employee)
    clock.current = date(2025, 7, 10)
    await advance_service.request_advance(db_session, allotment_id, 10)

    created = await range_service.create_range(
        db_session, allotment_id, _payload(date(2025, 8, 4), date(2025, 8, 5), is_advance=True)
    )
    await range_service.delete_range(db_session, created.id)

    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.advance_days_used == 8
    assert allotment.total_days == 38


async def test_delete_rescheduled_range_is_rejected(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    source = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))
    await reschedule_service.reschedule_merge(
        db_session,
        allotment_id,
        MergeReschedulePayload(source_range_ids=[source.id], start_date=date(2025, 5, 5), end_date=date(2025, 5, 6)),
    )

    with pytest.raises(StateError):
        await range_service.delete_range(db_session, source.id)


async def test_delete_rechecks_status_under_lock(
    engine: AsyncEngine,
    db_session: AsyncSession,
    employee: EmployeeInfo,
) -> None:
    allotment_id = await _open(db_session, employee)
    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))

    # Another transaction retires the range after this session last read it.
    async with AsyncSession(engine) as other:
        await other.execute(
            update(VacationRange)
            .where(col(VacationRange.id) == created.id)
            .values(status=RangeStatus.RESCHEDULED.value)
        )
        await other.commit()

    with pytest.raises(StateError):
        await range_service.delete_range(db_session, created.id)

    allotment = await allotment_service.get_allotment(db_session, allotment_id)
    assert allotment.flexible_days_used == 3


async def test_delete_unknown_range(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError, match="Range not found"):
        await range_service.delete_range(db_session, uuid.uuid4())


# ---------------------------------------------------------------------------
# Listing and external documents
# ---------------------------------------------------------------------------


async def test_list_reschedulable_excludes_started(
    db_session: AsyncSession,
    employee: EmployeeInfo,
    clock: FixedClock,
) -> None:
    allotment_id = await _open(db_session, employee)
    early = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))
    late = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 6, 9), date(2025, 6, 16)))

    clock.current = date(2025, 2, 3)
    listing = await range_service.list_reschedulable_ranges(db_session, allotment_id)
    ids = [r.id for r in listing.items]
    assert late.id in ids
    assert early.id not in ids


async def test_set_and_clear_external_document(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    created = await range_service.create_range(db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5)))

    linked = await range_service.set_external_document(db_session, created.id, "DOC-2025-001")
    assert linked.external_document_id == "DOC-2025-001"

    cleared = await range_service.set_external_document(db_session, created.id, None)
    assert cleared.external_document_id is None


async def test_assign_external_document_skips_linked(db_session: AsyncSession, employee: EmployeeInfo) -> None:
    allotment_id = await _open(db_session, employee)
    await range_service.create_range(
        db_session, allotment_id, _payload(date(2025, 2, 3), date(2025, 2, 5), external_document_id="DOC-OLD")
    )
    await range_service.create_range(db_session, allotment_id, _payload(date(2025, 6, 9), date(2025, 6, 16)))

    result = await range_service.assign_external_document(db_session, allotment_id, "DOC-NEW")
    assert result.updated == 1

    listing = await range_service.list_ranges(db_session, allotment_id)
    docs = sorted(r.external_document_id or "" for r in listing.items)
    assert docs == ["DOC-NEW", "DOC-OLD"]


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


async def test_validate_endpoint_reports_errors(async_client: AsyncClient, employee: EmployeeInfo) -> None:
    allotment = (await async_client.post(f"/employees/{employee.id}/allotments")).json()
    resp = await async_client.post(
        f"/allotments/{allotment['id']}/ranges/validate",
        json={"start_date": "2025-03-08", "end_date": "2025-03-10"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["is_valid"] is False
    assert data["errors"]


async def test_create_list_delete_via_api(async_client: AsyncClient, employee: EmployeeInfo) -> None:
    allotment = (await async_client.post(f"/employees/{employee.id}/allotments")).json()
    base = f"/allotments/{allotment['id']}/ranges"

    resp = await async_client.post(base, json={"start_date": "2025-02-03", "end_date": "2025-02-05"})
    assert resp.status_code == 201
    range_id = resp.json()["id"]

    resp = await async_client.get(base, params={"status": "ACTIVE"})
    assert resp.json()["total"] == 1

    resp = await async_client.get(f"/ranges/{range_id}")
    assert resp.json()["kind"] == "FLEXIBLE"

    resp = await async_client.delete(f"/ranges/{range_id}")
    assert resp.status_code == 204

    resp = await async_client.get(f"/ranges/{range_id}")
    assert resp.status_code == 404


async def test_create_invalid_range_returns_422(async_client: AsyncClient, employee: EmployeeInfo) -> None:
    allotment = (await async_client.post(f"/employees/{employee.id}/allotments")).json()
    resp = await async_client.post(
        f"/allotments/{allotment['id']}/ranges",
        json={"start_date": "2025-03-08", "end_date": "2025-03-10"},
    )
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"] == "RangeValidationError"
    assert any("weekend" in e for e in data["errors"])


async def test_external_document_endpoints(async_client: AsyncClient, employee: EmployeeInfo) -> None:
    allotment = (await async_client.post(f"/employees/{employee.id}/allotments")).json()
    base = f"/allotments/{allotment['id']}/ranges"
    range_id = (await async_client.post(base, json={"start_date": "2025-02-03", "end_date": "2025-02-05"})).json()[
        "id"
    ]

    resp = await async_client.put(f"/ranges/{range_id}/external-document", json={"external_document_id": "D-1"})
    assert resp.status_code == 200
    assert resp.json()["external_document_id"] == "D-1"

    resp = await async_client.post(f"{base}/external-document", json={"external_document_id": "D-2"})
    assert resp.json() == {"updated": 0}
