from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus
from ..schedules.model import Schedule
from ..service_times.model import ServiceTime
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's status at one schedule (date + service).

    ``student`` and ``schedule`` are optional relations; the aggregation
    functions document which of them they need populated.
    """

    record_id: int
    student_id: int
    schedule_id: int
    status: AttendanceStatus
    service_time_id: Optional[int] = None
    notes: Optional[str] = None
    student: Optional[Student] = None
    schedule: Optional[Schedule] = None

    @property
    def date(self) -> Optional[date]:
        return self.schedule.date if self.schedule else None

    @property
    def is_visitor(self) -> bool:
        return bool(self.student and self.student.is_visitor)

    @property
    def service_time(self) -> Optional[ServiceTime]:
        return self.schedule.service_time if self.schedule else None


@dataclass(frozen=True)
class SundayAttendanceRecord:
    """Read-model: a student's attendance on one date, merged across services."""

    date: date
    status: AttendanceStatus
    service_times_attended: tuple[ServiceTime, ...]
    notes: Optional[str]
    source_records: tuple[AttendanceRecord, ...]


@dataclass(frozen=True)
class AttendanceStats:
    """Per-service-record counts; visitors are counted apart from statuses."""

    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    visitors: int = 0
    total: int = 0
    total_present: int = 0


@dataclass(frozen=True)
class SundayStats:
    total: int = 0
    present: int = 0
    absent: int = 0
    excused: int = 0
    attendance_rate: int = 0


@dataclass(frozen=True)
class AbsenceAlert:
    student_id: int
    absence_count: int
    absence_dates: tuple[date, ...]
    first_absence_date: date
    last_absence_date: date


@dataclass(frozen=True)
class StudentAttendanceSummary:
    student_id: int
    sunday_records: list[SundayAttendanceRecord]
    stats: SundayStats
    consecutive_absences: int
    has_absence_alert: bool
