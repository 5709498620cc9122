from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from ..service_times.model import ServiceTime
from .model import Schedule
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_recent(
        self,
        *,
        limit: int,
        before: Optional[date] = None,
        include_cancelled: bool = False,
    ) -> Sequence[Schedule]:
        clauses = ["1=1"]
        params: list[object] = []
        if before is not None:
            clauses.append("sc.date < %s")
            params.append(before)
        if not include_cancelled:
            clauses.append("sc.is_cancelled = 0")
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT sc.schedule_id, sc.date, sc.lesson_id, sc.is_cancelled,
                       sv.service_time_id, sv.time, sv.name, sv.display_order
                FROM schedules sc
                LEFT JOIN service_times sv ON sv.service_time_id = sc.service_time_id
                WHERE {' AND '.join(clauses)}
                ORDER BY sc.date DESC, sv.time DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                Schedule(
                    schedule_id=int(r["schedule_id"]),
                    date=r["date"],
                    service_time=(
                        ServiceTime(
                            service_time_id=int(r["service_time_id"]),
                            time=normalize_mysql_time(r["time"]),
                            name=r["name"],
                            display_order=int(r.get("display_order") or 0),
                        )
                        if r.get("service_time_id") is not None
                        else None
                    ),
                    lesson_id=int(r["lesson_id"]) if r.get("lesson_id") is not None else None,
                    is_cancelled=bool(r.get("is_cancelled")),
                )
                for r in fetchall(cur)
            ]
