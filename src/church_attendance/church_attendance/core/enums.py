from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Per-service attendance status as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class StudentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    AGED_OUT = "aged-out"
    MOVED = "moved"


# present/late count as attending a service
ATTENDED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})
