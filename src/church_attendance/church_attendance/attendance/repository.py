from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord

UNSET = object()


class AttendanceRepository(Protocol):
    """CRUD collaborator. Every failure surfaces as ``DataAccessError``.

    Returned records carry their ``student`` and ``schedule`` relations.
    """

    def fetch_records_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def fetch_records_for_schedule(self, schedule_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def fetch_records_for_schedules(self, schedule_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def upsert_record(
        self,
        *,
        student_id: int,
        schedule_id: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
        service_time_id: Optional[int] = None,
    ) -> AttendanceRecord:
        """Insert or overwrite the record keyed on (student, schedule)."""

        raise NotImplementedError

    def update_record(
        self,
        record_id: int,
        *,
        status: Optional[AttendanceStatus] = None,
        notes=UNSET,
    ) -> AttendanceRecord:
        """Per-service edit. ``notes=None`` clears the note; omitted keeps it."""

        raise NotImplementedError

    def delete_record(self, record_id: int) -> AttendanceRecord:
        """Delete and return the removed record, relations included."""

        raise NotImplementedError
