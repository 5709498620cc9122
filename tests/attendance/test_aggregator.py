from __future__ import annotations

from datetime import date, time
from itertools import count

import pytest

from church_attendance.attendance import aggregator
from church_attendance.attendance.model import AttendanceRecord, SundayAttendanceRecord
from church_attendance.core.enums import AttendanceStatus
from church_attendance.schedules.model import Schedule
from church_attendance.service_times.model import ServiceTime
from church_attendance.students.model import Student

P, A, L, E = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.ABSENT,
    AttendanceStatus.LATE,
    AttendanceStatus.EXCUSED,
)

NINE = ServiceTime(service_time_id=1, time=time(9, 0), name="9h", display_order=1)
ELEVEN = ServiceTime(service_time_id=2, time=time(11, 0), name="11h", display_order=2)

_ids = count(1)


def rec(status, day=date(2025, 1, 5), service=NINE, *, notes=None, visitor=False, student_id=1):
    rid = next(_ids)
    return AttendanceRecord(
        record_id=rid,
        student_id=student_id,
        schedule_id=rid,
        status=status,
        service_time_id=service.service_time_id if service else None,
        notes=notes,
        student=Student(student_id=student_id, name=f"S{student_id}", is_visitor=visitor),
        schedule=Schedule(schedule_id=rid, date=day, service_time=service),
    )


def sunday(status, day=date(2025, 1, 5)):
    return SundayAttendanceRecord(date=day, status=status, service_times_attended=(), notes=None, source_records=())


@pytest.mark.parametrize(
    "statuses",
    [[P], [L], [P, A], [A, L], [E, L, A], [P, P]],
)
def test_merge_any_attendance_is_present(statuses):
    assert aggregator.merge_status([rec(s) for s in statuses]) == P


def test_merge_all_absent_is_absent():
    assert aggregator.merge_status([rec(A), rec(A, service=ELEVEN)]) == A


def test_merge_all_excused_is_excused():
    assert aggregator.merge_status([rec(E), rec(E, service=ELEVEN)]) == E


def test_merge_absent_and_excused_prefers_excused():
    assert aggregator.merge_status([rec(A), rec(E, service=ELEVEN)]) == E


def test_merge_empty_defaults_to_absent():
    assert aggregator.merge_status([]) == A


def test_merge_never_returns_late():
    for statuses in ([L], [L, L], [L, E]):
        assert aggregator.merge_status([rec(s) for s in statuses]) == P


def test_attended_service_times_only_present_or_late_in_time_order():
    records = [rec(L, service=ELEVEN), rec(E, service=NINE)]
    assert aggregator.attended_service_times(records) == (ELEVEN,)

    records = [rec(P, service=ELEVEN), rec(L, service=NINE)]
    assert aggregator.attended_service_times(records) == (NINE, ELEVEN)


def test_two_sundays_grouping_and_raw_stats():
    a, b = date(2025, 1, 12), date(2025, 1, 5)
    records = [
        rec(P, a, NINE),
        rec(A, a, ELEVEN),
        rec(A, b, NINE),
        rec(E, b, ELEVEN),
    ]

    grouped = aggregator.group_by_date(records)

    assert [g.date for g in grouped] == [a, b]
    assert grouped[0].status == P
    assert grouped[0].service_times_attended == (NINE,)
    assert grouped[1].status == E
    assert grouped[1].service_times_attended == ()

    stats = aggregator.compute_stats(records)
    assert (stats.present, stats.absent, stats.excused, stats.late) == (1, 2, 1, 0)
    assert stats.visitors == 0
    assert stats.total == 4
    assert stats.total_present == 2


def test_group_by_date_drops_dateless_and_partitions_records():
    day1, day2 = date(2025, 2, 2), date(2025, 2, 9)
    dateless = AttendanceRecord(record_id=999, student_id=1, schedule_id=999, status=A)
    no_date_schedule = AttendanceRecord(
        record_id=998, student_id=1, schedule_id=998, status=A, schedule=Schedule(schedule_id=998, date=None)
    )
    kept = [rec(P, day1), rec(A, day1, ELEVEN), rec(E, day2)]

    grouped = aggregator.group_by_date(kept + [dateless, no_date_schedule])

    all_sources = [r.record_id for g in grouped for r in g.source_records]
    assert sorted(all_sources) == sorted(r.record_id for r in kept)
    assert len({g.date for g in grouped}) == len(grouped) == 2


def test_group_by_date_orders_sources_by_service_and_picks_first_note():
    records = [
        rec(A, service=ELEVEN, notes="second"),
        rec(P, service=NINE, notes=""),
        rec(A, service=None, notes=None),
    ]
    [g] = aggregator.group_by_date(records)

    assert [r.service_time for r in g.source_records] == [None, NINE, ELEVEN]
    assert g.notes == "second"


def test_group_by_date_ascending_when_requested():
    records = [rec(P, date(2025, 1, 12)), rec(P, date(2025, 1, 5))]
    grouped = aggregator.group_by_date(records, newest_first=False)
    assert [g.date for g in grouped] == [date(2025, 1, 5), date(2025, 1, 12)]


def test_compute_stats_counts_visitors_apart():
    records = [
        rec(P),
        rec(L),
        rec(A),
        rec(P, visitor=True, student_id=7),
        rec(A, visitor=True, student_id=8),
    ]
    stats = aggregator.compute_stats(records)

    assert stats.present == 1
    assert stats.late == 1
    assert stats.absent == 1
    assert stats.visitors == 2
    assert stats.total == 5
    assert stats.total_present == stats.present + stats.late + stats.excused + stats.visitors == 4


def test_compute_stats_without_student_relation_counts_as_regular():
    bare = AttendanceRecord(record_id=1, student_id=1, schedule_id=1, status=P)
    stats = aggregator.compute_stats([bare])
    assert stats.present == 1
    assert stats.visitors == 0


def test_compute_stats_empty():
    stats = aggregator.compute_stats([])
    assert stats.total == stats.total_present == stats.visitors == 0


def test_sunday_stats_zero_guard():
    stats = aggregator.compute_sunday_stats([])
    assert (stats.total, stats.present, stats.absent, stats.excused, stats.attendance_rate) == (0, 0, 0, 0, 0)


def test_sunday_stats_rate_rounds_half_up():
    # 1 present out of 8 Sundays = 12.5%
    records = [sunday(P)] + [sunday(A) for _ in range(7)]
    assert aggregator.compute_sunday_stats(records).attendance_rate == 13

    stats = aggregator.compute_sunday_stats([sunday(P), sunday(E), sunday(A)])
    assert (stats.total, stats.present, stats.excused, stats.absent) == (3, 1, 1, 1)
    assert stats.attendance_rate == 67


def test_consecutive_absences_stops_at_first_non_absent():
    records = [sunday(A), sunday(A), sunday(P), sunday(A)]
    assert aggregator.consecutive_absences(records) == 2


def test_consecutive_absences_excused_breaks_streak():
    assert aggregator.consecutive_absences([sunday(E), sunday(A)]) == 0
    assert aggregator.consecutive_absences([]) == 0


def test_absence_alert_threshold():
    three = [sunday(A)] * 3
    two = [sunday(A)] * 2 + [sunday(P)]
    assert aggregator.has_absence_alert(aggregator.consecutive_absences(three))
    assert not aggregator.has_absence_alert(aggregator.consecutive_absences(two))
    assert aggregator.has_absence_alert(2, threshold=2)
