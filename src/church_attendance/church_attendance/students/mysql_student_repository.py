from __future__ import annotations

from typing import Sequence

from ..core.enums import StudentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_roster_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id
                FROM students
                WHERE status=%s AND is_visitor=0
                ORDER BY student_id
                """,
                (StudentStatus.ACTIVE.value,),
            )
            return [int(r["student_id"]) for r in fetchall(cur)]
