from sqlmodel import SQLModel

from vacation_scheduler.models.allotment import VacationAllotment
from vacation_scheduler.models.audit import AuditLog
from vacation_scheduler.models.base import TimestampMixin, UUIDBase
from vacation_scheduler.models.enums import (
    AllotmentStatus,
    AuditAction,
    AuditEntityType,
    LeftoverPool,
    RangeKind,
    RangeStatus,
    RescheduleMode,
)
from vacation_scheduler.models.range import VacationRange

__all__ = [
    "AllotmentStatus",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "LeftoverPool",
    "RangeKind",
    "RangeStatus",
    "RescheduleMode",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "VacationAllotment",
    "VacationRange",
]
