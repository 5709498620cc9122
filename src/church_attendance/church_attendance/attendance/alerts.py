"""Roster-wide consecutive-absence alerts.

Works on raw per-schedule records over a fixed window of recent schedules.
Unlike ``aggregator.consecutive_absences`` (which looks at merged Sundays
and only asks "absent or not"), any present, late or excused mark on a
schedule ends the streak here.
"""
from __future__ import annotations

import logging
from datetime import date, time
from typing import Iterable, Optional

from ..core.constants import DEFAULT_ABSENCE_THRESHOLD, DEFAULT_ROSTER_WINDOW_SCHEDULES
from ..core.enums import AttendanceStatus
from ..schedules.model import Schedule
from .model import AbsenceAlert, AttendanceRecord

logger = logging.getLogger(__name__)


def _newest_first_key(schedule: Schedule) -> tuple[date, time]:
    st = schedule.service_time
    return (schedule.date, st.time if st else time.min)


def recent_window(
    schedules: Iterable[Schedule],
    *,
    window: int = DEFAULT_ROSTER_WINDOW_SCHEDULES,
    before: Optional[date] = None,
) -> list[Schedule]:
    """The ``window`` most recent usable schedules, newest first.

    Cancelled and dateless schedules are skipped, as is anything dated on or
    after ``before`` (the date being marked right now, or today).
    """

    usable = [
        s
        for s in schedules
        if not s.is_cancelled and s.date is not None and (before is None or s.date < before)
    ]
    usable.sort(key=_newest_first_key, reverse=True)
    return usable[: max(int(window), 0)]


def roster_absence_alerts(
    student_ids: Iterable[int],
    schedules: Iterable[Schedule],
    records: Iterable[AttendanceRecord],
    *,
    threshold: int = DEFAULT_ABSENCE_THRESHOLD,
    window: int = DEFAULT_ROSTER_WINDOW_SCHEDULES,
    before: Optional[date] = None,
) -> list[AbsenceAlert]:
    """Alerts for students whose latest ``threshold``+ schedules are absences.

    A schedule with no record for the student counts as an absence, unless the
    student has a record on another schedule of the same date (attending only
    the 9h service is not missing the 11h one).
    """

    scan = recent_window(schedules, window=window, before=before)
    if not scan:
        logger.debug("No schedules in window, no alerts")
        return []

    scan_ids = {s.schedule_id for s in scan}
    date_by_schedule = {s.schedule_id: s.date for s in scan}
    status_by_key: dict[tuple[int, int], AttendanceStatus] = {}
    marked_dates: dict[int, set[date]] = {}
    for r in records:
        if r.schedule_id not in scan_ids:
            continue
        status_by_key[(r.student_id, r.schedule_id)] = r.status
        marked_dates.setdefault(r.student_id, set()).add(date_by_schedule[r.schedule_id])

    alerts: list[AbsenceAlert] = []
    for student_id in dict.fromkeys(student_ids):
        seen = marked_dates.get(student_id, set())
        streak = 0
        dates: list[date] = []
        for schedule in scan:
            status = status_by_key.get((student_id, schedule.schedule_id))
            if status is None:
                if schedule.date in seen:
                    continue
                status = AttendanceStatus.ABSENT
            if status != AttendanceStatus.ABSENT:
                break
            streak += 1
            if schedule.date not in dates:
                dates.append(schedule.date)

        if not streak or streak < threshold:
            continue

        dates.reverse()
        logger.debug("Absence alert for student %s: %s consecutive", student_id, streak)
        alerts.append(
            AbsenceAlert(
                student_id=student_id,
                absence_count=streak,
                absence_dates=tuple(dates),
                first_absence_date=dates[0],
                last_absence_date=dates[-1],
            )
        )

    alerts.sort(key=lambda a: (-a.absence_count, a.student_id))
    return alerts
