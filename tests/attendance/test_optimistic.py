from __future__ import annotations

import threading

import pytest

from church_attendance.attendance.model import AttendanceRecord
from church_attendance.attendance.optimistic import (
    OptimisticUpdate,
    RecordCache,
    remove_record,
    replace_status,
    run_optimistic,
)
from church_attendance.core.enums import AttendanceStatus
from church_attendance.core.exceptions import DataAccessError

KEY = ("student", 1)


def _records():
    return [
        AttendanceRecord(record_id=1, student_id=1, schedule_id=10, status=AttendanceStatus.ABSENT),
        AttendanceRecord(record_id=2, student_id=1, schedule_id=11, status=AttendanceStatus.PRESENT, notes="ok"),
    ]


def test_successful_write_keeps_optimistic_value_and_invalidates():
    cache = RecordCache()
    cache.set(KEY, _records())

    seen = {}

    def send():
        seen["during"] = cache.get(KEY)[0].status
        return "saved"

    result = run_optimistic(cache, KEY, replace_status(1, AttendanceStatus.EXCUSED), send)

    assert result == "saved"
    assert seen["during"] == AttendanceStatus.EXCUSED
    assert cache.get(KEY)[0].status == AttendanceStatus.EXCUSED
    assert cache.is_stale(KEY)


def test_failed_write_restores_snapshot_and_reraises():
    cache = RecordCache()
    original = _records()
    cache.set(KEY, original)

    def send():
        raise DataAccessError("backend down")

    with pytest.raises(DataAccessError):
        run_optimistic(cache, KEY, remove_record(2), send)

    assert cache.get(KEY) == original
    assert cache.is_stale(KEY)


def test_other_errors_are_not_compensated():
    cache = RecordCache()
    cache.set(KEY, _records())

    def send():
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError):
        run_optimistic(cache, KEY, remove_record(2), send)

    assert [r.record_id for r in cache.get(KEY)] == [1]


def test_apply_without_cached_entry_is_noop():
    cache = RecordCache()
    update = OptimisticUpdate(cache, KEY, remove_record(1))
    update.snapshot()
    update.apply()
    assert cache.get(KEY) is None

    cache.set(KEY, _records())
    update.compensate()
    assert cache.get(KEY) is None


def test_replace_status_can_clear_notes():
    updated = replace_status(2, notes=None)(_records())
    assert updated[1].notes is None
    assert updated[1].status == AttendanceStatus.PRESENT
    assert updated[0] == _records()[0]


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = RecordCache(ttl=30, clock=clock)
    cache.set(KEY, _records())

    clock.now += 29.5
    assert not cache.is_stale(KEY)

    clock.now += 0.5
    assert cache.is_stale(KEY)
    # the expired value is still there for snapshots until refetched
    assert [r.record_id for r in cache.get(KEY)] == [1, 2]

    cache.set(KEY, _records()[:1])
    assert not cache.is_stale(KEY)


def test_no_ttl_keeps_entries_until_invalidated():
    clock = FakeClock()
    cache = RecordCache(ttl=None, clock=clock)
    cache.set(KEY, _records())

    clock.now += 10**6
    assert not cache.is_stale(KEY)

    cache.invalidate(KEY)
    assert cache.is_stale(KEY)


def test_cache_evicts_oldest_entry_past_bound():
    cache = RecordCache(max_entries=2)
    cache.set(("student", 1), _records())
    cache.set(("student", 2), _records())
    cache.invalidate(("student", 1))
    cache.set(("student", 3), _records())

    assert len(cache) == 2
    assert cache.get(("student", 1)) is None
    assert cache.get(("student", 2)) is not None
    assert not cache.is_stale(("student", 3))


def test_cache_bound_holds_across_threads():
    cache = RecordCache(max_entries=50)

    def fill(offset):
        for i in range(200):
            cache.set(("student", offset * 1000 + i), _records())
            cache.is_stale(("student", offset * 1000 + i))

    threads = [threading.Thread(target=fill, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 50
