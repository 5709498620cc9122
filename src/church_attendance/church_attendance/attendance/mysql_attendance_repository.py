from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, StudentStatus
from ..core.exceptions import DataAccessError, RecordNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from ..schedules.model import Schedule
from ..service_times.model import ServiceTime
from ..students.model import Student
from .model import AttendanceRecord
from .repository import UNSET, AttendanceRepository

logger = logging.getLogger(__name__)

_SELECT_WITH_RELATIONS = """
    SELECT
        ar.record_id, ar.student_id, ar.schedule_id, ar.status, ar.service_time_id, ar.notes,
        st.name AS student_name, st.is_visitor, st.status AS student_status,
        sc.date AS schedule_date, sc.lesson_id, sc.is_cancelled,
        sv.service_time_id AS sv_id, sv.time AS sv_time, sv.name AS sv_name, sv.display_order AS sv_order
    FROM attendance_records ar
    JOIN students st ON st.student_id = ar.student_id
    LEFT JOIN schedules sc ON sc.schedule_id = ar.schedule_id
    LEFT JOIN service_times sv ON sv.service_time_id = sc.service_time_id
"""


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    service_time = None
    if r.get("sv_id") is not None:
        service_time = ServiceTime(
            service_time_id=int(r["sv_id"]),
            time=normalize_mysql_time(r["sv_time"]),
            name=r["sv_name"],
            display_order=int(r.get("sv_order") or 0),
        )

    return AttendanceRecord(
        record_id=int(r["record_id"]),
        student_id=int(r["student_id"]),
        schedule_id=int(r["schedule_id"]),
        status=AttendanceStatus(r["status"]),
        service_time_id=int(r["service_time_id"]) if r.get("service_time_id") is not None else None,
        notes=r.get("notes"),
        student=Student(
            student_id=int(r["student_id"]),
            name=r["student_name"],
            is_visitor=bool(r.get("is_visitor")),
            status=StudentStatus(r.get("student_status") or StudentStatus.ACTIVE.value),
        ),
        schedule=Schedule(
            schedule_id=int(r["schedule_id"]),
            date=r.get("schedule_date"),
            service_time=service_time,
            lesson_id=int(r["lesson_id"]) if r.get("lesson_id") is not None else None,
            is_cancelled=bool(r.get("is_cancelled")),
        ),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_by_id(self, cur, record_id: int) -> Optional[AttendanceRecord]:
        cur.execute(_SELECT_WITH_RELATIONS + " WHERE ar.record_id=%s", (int(record_id),))
        r = fetchone(cur)
        return _row_to_record(r) if r else None

    def fetch_records_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_WITH_RELATIONS + " WHERE ar.student_id=%s ORDER BY sc.date DESC, sv.time ASC",
                (int(student_id),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def fetch_records_for_schedule(self, schedule_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_WITH_RELATIONS + " WHERE ar.schedule_id=%s ORDER BY st.name ASC",
                (int(schedule_id),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def fetch_records_for_schedules(self, schedule_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        ids = [int(i) for i in schedule_ids]
        if not ids:
            return []

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_WITH_RELATIONS + f" WHERE ar.schedule_id IN ({placeholders})",
                tuple(ids),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def upsert_record(
        self,
        *,
        student_id: int,
        schedule_id: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
        service_time_id: Optional[int] = None,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, schedule_id, status, service_time_id, notes)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    service_time_id=VALUES(service_time_id),
                    notes=VALUES(notes)
                """,
                (int(student_id), int(schedule_id), status.value, service_time_id, notes or None),
            )
            cur.execute(
                _SELECT_WITH_RELATIONS + " WHERE ar.student_id=%s AND ar.schedule_id=%s",
                (int(student_id), int(schedule_id)),
            )
            r = fetchone(cur)
            if not r:
                raise DataAccessError(f"Upsert for student {student_id} / schedule {schedule_id} returned no row")
            return _row_to_record(r)

    def update_record(
        self,
        record_id: int,
        *,
        status: Optional[AttendanceStatus] = None,
        notes=UNSET,
    ) -> AttendanceRecord:
        sets: list[str] = []
        params: list[object] = []
        if status is not None:
            sets.append("status=%s")
            params.append(status.value)
        if notes is not UNSET:
            sets.append("notes=%s")
            params.append(notes or None)

        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE attendance_records SET {', '.join(sets)} WHERE record_id=%s",
                    (*params, int(record_id)),
                )
            record = self._get_by_id(cur, record_id)
            if record is None:
                raise RecordNotFoundError(record_id)
            return record

    def delete_record(self, record_id: int) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            record = self._get_by_id(cur, record_id)
            if record is None:
                raise RecordNotFoundError(record_id)
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))
            if cur.rowcount == 0:
                raise RecordNotFoundError(record_id)
        logger.debug("Deleted attendance record %s", record_id)
        return record
