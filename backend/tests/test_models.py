from __future__ import annotations

import uuid
from datetime import date

from vacation_scheduler.models import AuditLog, SQLModel, VacationAllotment, VacationRange
from vacation_scheduler.models.enums import AllotmentStatus, RangeStatus

EXPECTED_TABLES = {"audit_log", "vacation_allotment", "vacation_range"}


def test_all_tables_registered() -> None:
    assert set(SQLModel.metadata.tables.keys()) == EXPECTED_TABLES


def test_allotment_defaults() -> None:
    allotment = VacationAllotment(
        employee_id=uuid.uuid4(),
        period_label="2025-2026",
        period_start=date(2025, 1, 10),
        period_end=date(2026, 1, 10),
    )
    assert allotment.id is not None
    assert allotment.total_days == 30
    assert allotment.flexible_days_available == 7
    assert allotment.block_days_available == 23
    assert allotment.flexible_days_used == 0
    assert allotment.block_days_used == 0
    assert allotment.advance_days_used == 0
    assert allotment.status == AllotmentStatus.PENDING
    assert allotment.version == 1


def test_range_defaults() -> None:
    vacation_range = VacationRange(
        allotment_id=uuid.uuid4(),
        employee_id=uuid.uuid4(),
        start_date=date(2025, 2, 3),
        end_date=date(2025, 2, 5),
        requested_days=3,
        kind="FLEXIBLE",
    )
    assert vacation_range.status == RangeStatus.ACTIVE
    assert vacation_range.rescheduled_from == []
    assert vacation_range.rescheduled_to is None
    assert vacation_range.external_document_id is None
    assert not vacation_range.is_advance
    assert not vacation_range.includes_weekend_extension


def test_range_table_checks_dates() -> None:
    table = SQLModel.metadata.tables["vacation_range"]
    names = {c.name for c in table.constraints}
    assert "ck_range_date_order" in names
    assert "ck_range_requested_days" in names


def test_audit_log_instantiation() -> None:
    log = AuditLog(
        employee_id=uuid.uuid4(),
        entity_type="RANGE",
        entity_id=uuid.uuid4(),
        action="CREATE",
    )
    assert log.before_json is None
    assert log.after_json is None
