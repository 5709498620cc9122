from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import format_date_pt, today_local
from ..common.validators import clean_notes, optional_positive_id, require_positive_id, require_status
from ..core.constants import DEFAULT_ABSENCE_THRESHOLD, DEFAULT_ROSTER_WINDOW_SCHEDULES
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from . import aggregator
from .alerts import roster_absence_alerts
from .model import AbsenceAlert, AttendanceRecord, AttendanceStats, StudentAttendanceSummary, SundayAttendanceRecord
from .optimistic import RecordCache, remove_record, replace_status, run_optimistic
from .repository import UNSET, AttendanceRepository

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Presente",
    AttendanceStatus.ABSENT: "Falta",
    AttendanceStatus.EXCUSED: "Justificada",
    AttendanceStatus.LATE: "Atrasado",
}


def student_key(student_id: int) -> tuple[str, int]:
    return ("student", int(student_id))


def schedule_key(schedule_id: int) -> tuple[str, int]:
    return ("schedule", int(schedule_id))


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository | None = None,
        students: StudentRepository | None = None,
        *,
        absence_threshold: int = DEFAULT_ABSENCE_THRESHOLD,
        roster_window: int = DEFAULT_ROSTER_WINDOW_SCHEDULES,
        cache: RecordCache | None = None,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._students = students
        self._threshold = int(absence_threshold)
        self._window = int(roster_window)
        self._cache = cache if cache is not None else RecordCache()

    @property
    def cache(self) -> RecordCache:
        return self._cache

    def _cached(self, key, fetch: Callable[[], Sequence[AttendanceRecord]]) -> list[AttendanceRecord]:
        if not self._cache.is_stale(key):
            records = self._cache.get(key)
            if records is not None:
                return records
        records = list(fetch())
        self._cache.set(key, records)
        return records

    def _invalidate_for(self, record: AttendanceRecord) -> None:
        # keyed on the stored owner, never on what the caller claimed
        self._cache.invalidate(student_key(record.student_id))
        self._cache.invalidate(schedule_key(record.schedule_id))

    def _student_records(self, student_id: int) -> list[AttendanceRecord]:
        return self._cached(student_key(student_id), lambda: self._attendance.fetch_records_for_student(student_id))

    def student_summary(self, student_id: int) -> StudentAttendanceSummary:
        student_id = require_positive_id(student_id, "student_id")
        sundays = aggregator.group_by_date(self._student_records(student_id))
        streak = aggregator.consecutive_absences(sundays)
        return StudentAttendanceSummary(
            student_id=student_id,
            sunday_records=sundays,
            stats=aggregator.compute_sunday_stats(sundays),
            consecutive_absences=streak,
            has_absence_alert=aggregator.has_absence_alert(streak, self._threshold),
        )

    def schedule_stats(self, schedule_id: int) -> AttendanceStats:
        schedule_id = require_positive_id(schedule_id, "schedule_id")
        records = self._cached(
            schedule_key(schedule_id), lambda: self._attendance.fetch_records_for_schedule(schedule_id)
        )
        return aggregator.compute_stats(records)

    def mark(
        self,
        student_id: int,
        schedule_id: int,
        status,
        notes: Optional[str] = None,
        service_time_id: Optional[int] = None,
    ) -> AttendanceRecord:
        record = self._attendance.upsert_record(
            student_id=require_positive_id(student_id, "student_id"),
            schedule_id=require_positive_id(schedule_id, "schedule_id"),
            status=require_status(status),
            notes=clean_notes(notes),
            service_time_id=optional_positive_id(service_time_id, "service_time_id"),
        )
        self._invalidate_for(record)
        return record

    def edit_record(self, record_id: int, student_id: int, *, status=None, notes=UNSET) -> AttendanceRecord:
        """Optimistic per-service edit.

        ``student_id`` only picks the cache entry patched while the write is in
        flight; the entries invalidated afterwards come from the stored record.
        """

        record_id = require_positive_id(record_id, "record_id")
        new_status = require_status(status) if status is not None else None
        if notes is not UNSET:
            notes = clean_notes(notes)
        if new_status is None and notes is UNSET:
            raise ValidationError("Nothing to update")

        record = run_optimistic(
            self._cache,
            student_key(require_positive_id(student_id, "student_id")),
            replace_status(record_id, new_status, notes),
            lambda: self._attendance.update_record(record_id, status=new_status, notes=notes),
        )
        self._invalidate_for(record)
        return record

    def remove_record(self, record_id: int, student_id: Optional[int] = None) -> AttendanceRecord:
        record_id = require_positive_id(record_id, "record_id")

        def send() -> AttendanceRecord:
            return self._attendance.delete_record(record_id)

        if student_id is None:
            record = send()
        else:
            record = run_optimistic(
                self._cache,
                student_key(require_positive_id(student_id, "student_id")),
                remove_record(record_id),
                send,
            )
        self._invalidate_for(record)
        return record

    def roster_alerts(self, *, before=None) -> Sequence[AbsenceAlert]:
        if not self._schedules or not self._students:
            raise ValidationError("Roster alerts need schedule and student repositories")

        before = before or today_local()
        schedules = self._schedules.list_recent(limit=self._window, before=before)
        records = self._attendance.fetch_records_for_schedules([s.schedule_id for s in schedules])
        student_ids = self._students.list_active_roster_ids()
        logger.debug(
            "Roster alert scan: %s students, %s schedules, %s records", len(student_ids), len(schedules), len(records)
        )
        return roster_absence_alerts(
            student_ids,
            schedules,
            records,
            threshold=self._threshold,
            window=self._window,
            before=before,
        )

    @staticmethod
    def to_ui(sunday: SundayAttendanceRecord) -> dict:
        return {
            "date": sunday.date.strftime("%Y-%m-%d"),
            "date_display": format_date_pt(sunday.date),
            "status": sunday.status.value,
            "label": STATUS_LABELS.get(sunday.status, sunday.status.value),
            "service_times": [st.name for st in sunday.service_times_attended],
            "notes": sunday.notes,
            "records": [
                {
                    "record_id": r.record_id,
                    "schedule_id": r.schedule_id,
                    "service_time": r.service_time.name if r.service_time else None,
                    "status": r.status.value,
                    "label": STATUS_LABELS.get(r.status, r.status.value),
                    "notes": r.notes,
                }
                for r in sunday.source_records
            ],
        }

    def summary_to_ui(self, summary: StudentAttendanceSummary) -> dict:
        return {
            "student_id": summary.student_id,
            "stats": asdict(summary.stats),
            "consecutive_absences": summary.consecutive_absences,
            "has_absence_alert": summary.has_absence_alert,
            "sundays": [self.to_ui(s) for s in summary.sunday_records],
        }
