"""Optimistic cache updates with explicit compensation.

The flow mirrors ``db_cursor``'s commit/rollback: take a snapshot, apply the
optimistic value, send the write, restore the snapshot if the write fails,
and invalidate the entry either way so the next read refetches.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Hashable, List, Optional, Tuple, TypeVar

from ..core.constants import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL_SECONDS
from ..core.enums import AttendanceStatus
from ..core.exceptions import DataAccessError
from .model import AttendanceRecord
from .repository import UNSET

logger = logging.getLogger(__name__)

T = TypeVar("T")
Records = List[AttendanceRecord]
ApplyFn = Callable[[Records], Records]


@dataclass
class RecordCache:
    """Cache of fetched records, keyed by query.

    Entries go stale after ``ttl`` seconds (``None`` keeps them until
    invalidated) and the map holds at most ``max_entries`` keys, dropping the
    least recently stored first. Safe to share between request threads.
    """

    ttl: Optional[float] = DEFAULT_CACHE_TTL_SECONDS
    max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    clock: Callable[[], float] = time.monotonic
    _entries: "OrderedDict[Hashable, Tuple[float, Records]]" = field(default_factory=OrderedDict)
    _stale: set = field(default_factory=set)
    _lock: Any = field(default_factory=threading.Lock, repr=False, compare=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: Hashable) -> Optional[Records]:
        with self._lock:
            entry = self._entries.get(key)
            return list(entry[1]) if entry is not None else None

    def set(self, key: Hashable, records: Records) -> None:
        with self._lock:
            self._entries[key] = (self.clock(), list(records))
            self._entries.move_to_end(key)
            self._stale.discard(key)
            while self.max_entries and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._stale.discard(evicted)

    def discard(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._stale.discard(key)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._stale.add(key)

    def is_stale(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or key in self._stale:
                return True
            return self.ttl is not None and self.clock() - entry[0] >= self.ttl


@dataclass
class OptimisticUpdate:
    """One ``{snapshot, apply, compensate}`` unit against a cache entry."""

    cache: RecordCache
    key: Hashable
    apply_fn: ApplyFn
    _snapshot: Optional[Records] = None
    _taken: bool = False

    def snapshot(self) -> None:
        self._snapshot = self.cache.get(self.key)
        self._taken = True

    def apply(self) -> None:
        current = self.cache.get(self.key)
        if current is None:
            return
        self.cache.set(self.key, self.apply_fn(current))

    def compensate(self) -> None:
        if not self._taken:
            return
        if self._snapshot is None:
            self.cache.discard(self.key)
        else:
            self.cache.set(self.key, self._snapshot)


def run_optimistic(cache: RecordCache, key: Hashable, apply_fn: ApplyFn, send: Callable[[], T]) -> T:
    """Apply ``apply_fn`` to the cached entry, then perform ``send``.

    On ``DataAccessError`` the entry is restored and the error re-raised.
    """

    update = OptimisticUpdate(cache, key, apply_fn)
    update.snapshot()
    update.apply()
    try:
        return send()
    except DataAccessError:
        logger.warning("Write failed, restoring cached records for %r", key)
        update.compensate()
        raise
    finally:
        cache.invalidate(key)


def replace_status(record_id: int, status: Optional[AttendanceStatus] = None, notes=UNSET) -> ApplyFn:
    def _apply(records: Records) -> Records:
        out = []
        for r in records:
            if r.record_id == record_id:
                if status is not None:
                    r = replace(r, status=status)
                if notes is not UNSET:
                    r = replace(r, notes=notes or None)
            out.append(r)
        return out

    return _apply


def remove_record(record_id: int) -> ApplyFn:
    def _apply(records: Records) -> Records:
        return [r for r in records if r.record_id != record_id]

    return _apply
