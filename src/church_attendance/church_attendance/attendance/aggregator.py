"""Sunday aggregation of per-service attendance records.

Everything here is a pure function of its arguments. Callers recompute the
derived read-models from the current record set after every edit.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, time
from typing import Iterable, Sequence

from ..core.constants import DEFAULT_ABSENCE_THRESHOLD
from ..core.enums import ATTENDED_STATUSES, AttendanceStatus
from ..service_times.model import ServiceTime
from .model import AttendanceRecord, AttendanceStats, SundayAttendanceRecord, SundayStats


def merge_status(records: Sequence[AttendanceRecord]) -> AttendanceStatus:
    """Collapse one date's per-service records into a single status.

    Attending any service (present or late) makes the day present. Otherwise
    excused wins over absent, so only an all-absent day is absent.
    """

    if not records:
        return AttendanceStatus.ABSENT

    statuses = {r.status for r in records}
    if statuses & ATTENDED_STATUSES:
        return AttendanceStatus.PRESENT
    if statuses == {AttendanceStatus.ABSENT}:
        return AttendanceStatus.ABSENT
    return AttendanceStatus.EXCUSED


def _service_sort_key(record: AttendanceRecord) -> tuple[int, time, int]:
    st = record.service_time
    if st is None:
        return (0, time.min, 0)
    return (1, st.time, st.display_order)


def sort_by_service_time(records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """Order records by time of day; records without a service come first."""
    return sorted(records, key=_service_sort_key)


def attended_service_times(records: Iterable[AttendanceRecord]) -> tuple[ServiceTime, ...]:
    """Service times (ascending) where the student was present or late."""

    return tuple(
        r.service_time
        for r in sort_by_service_time(records)
        if r.service_time is not None and r.status in ATTENDED_STATUSES
    )


def group_by_date(records: Iterable[AttendanceRecord], *, newest_first: bool = True) -> list[SundayAttendanceRecord]:
    """Partition records by schedule date and merge each bucket.

    Requires the ``schedule`` relation; records without a resolvable date
    are dropped.
    """

    by_date: dict[date, list[AttendanceRecord]] = defaultdict(list)
    for record in records:
        if record.date is None:
            continue
        by_date[record.date].append(record)

    out: list[SundayAttendanceRecord] = []
    for day, day_records in by_date.items():
        ordered = sort_by_service_time(day_records)
        out.append(
            SundayAttendanceRecord(
                date=day,
                status=merge_status(ordered),
                service_times_attended=attended_service_times(ordered),
                notes=next((r.notes for r in ordered if r.notes), None),
                source_records=tuple(ordered),
            )
        )

    out.sort(key=lambda s: s.date, reverse=newest_first)
    return out


def compute_stats(records: Sequence[AttendanceRecord]) -> AttendanceStats:
    """Counts over raw per-service records (not per Sunday).

    Visitors are counted once per record whatever their status and are left
    out of the status buckets. Needs the ``student`` relation; a record
    without one counts as a regular student.
    """

    counts = {status: 0 for status in AttendanceStatus}
    visitors = 0
    for r in records:
        if r.is_visitor:
            visitors += 1
        else:
            counts[r.status] += 1

    present = counts[AttendanceStatus.PRESENT]
    late = counts[AttendanceStatus.LATE]
    excused = counts[AttendanceStatus.EXCUSED]
    return AttendanceStats(
        present=present,
        absent=counts[AttendanceStatus.ABSENT],
        late=late,
        excused=excused,
        visitors=visitors,
        total=len(records),
        total_present=present + late + excused + visitors,
    )


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def compute_sunday_stats(sunday_records: Sequence[SundayAttendanceRecord]) -> SundayStats:
    """Counts over merged Sunday records plus the attendance rate (percent)."""

    total = len(sunday_records)
    if total == 0:
        return SundayStats()

    present = sum(1 for s in sunday_records if s.status in ATTENDED_STATUSES)
    absent = sum(1 for s in sunday_records if s.status == AttendanceStatus.ABSENT)
    excused = sum(1 for s in sunday_records if s.status == AttendanceStatus.EXCUSED)

    return SundayStats(
        total=total,
        present=present,
        absent=absent,
        excused=excused,
        attendance_rate=_round_half_up(100 * (present + excused) / total),
    )


def consecutive_absences(sunday_records_newest_first: Iterable[SundayAttendanceRecord]) -> int:
    """Leading run of absent Sundays. Input must already be newest first."""

    count = 0
    for record in sunday_records_newest_first:
        if record.status != AttendanceStatus.ABSENT:
            break
        count += 1
    return count


def has_absence_alert(count: int, threshold: int = DEFAULT_ABSENCE_THRESHOLD) -> bool:
    return count >= threshold
