from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.optimistic import RecordCache
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_ABSENCE_THRESHOLD,
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_ROSTER_WINDOW_SCHEDULES,
)
from .database.connection import DBConfig, DatabaseConnection
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .students.mysql_student_repository import MySQLStudentRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    schedules_repo: MySQLScheduleRepository
    students_repo: MySQLStudentRepository

    attendance_service: AttendanceService


def build_container(
    *,
    db_config: dict,
    absence_threshold: int = DEFAULT_ABSENCE_THRESHOLD,
    roster_window: int = DEFAULT_ROSTER_WINDOW_SCHEDULES,
    cache_ttl: float | None = DEFAULT_CACHE_TTL_SECONDS,
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    students_repo = MySQLStudentRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        schedules_repo,
        students_repo,
        absence_threshold=absence_threshold,
        roster_window=roster_window,
        cache=RecordCache(ttl=cache_ttl, max_entries=cache_max_entries),
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        students_repo=students_repo,
        attendance_service=attendance_service,
    )
