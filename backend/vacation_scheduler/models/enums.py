from __future__ import annotations

import enum


class AllotmentStatus(enum.StrEnum):
    """Administrative status of a yearly allotment (informational only)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RangeKind(enum.StrEnum):
    """Which pool a range draws its days from."""

    FLEXIBLE = "FLEXIBLE"
    BLOCK = "BLOCK"


class RangeStatus(enum.StrEnum):
    """Lifecycle of a range. RESCHEDULED is terminal."""

    ACTIVE = "ACTIVE"
    RESCHEDULED = "RESCHEDULED"


class RescheduleMode(enum.StrEnum):
    """How selected ranges are replaced."""

    MERGE = "MERGE"
    PRESERVE_COUNT = "PRESERVE_COUNT"


class LeftoverPool(enum.StrEnum):
    """Where leftover days of a reschedule were banked."""

    NONE = "NONE"
    FLEXIBLE = "FLEXIBLE"
    BLOCK = "BLOCK"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    ALLOTMENT = "ALLOTMENT"
    RANGE = "RANGE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESCHEDULE = "RESCHEDULE"
    ADVANCE = "ADVANCE"
