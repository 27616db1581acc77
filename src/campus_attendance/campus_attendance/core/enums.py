from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for route gating."""

    STUDENT = "student"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class LeaveStatus(str, Enum):
    """Leave lifecycle. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BulkOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"
