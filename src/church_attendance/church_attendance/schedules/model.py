from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..service_times.model import ServiceTime


@dataclass(frozen=True)
class Schedule:
    """A single (date, service time) lesson instance."""

    schedule_id: int
    date: Optional[date]
    service_time: Optional[ServiceTime] = None
    lesson_id: Optional[int] = None
    is_cancelled: bool = False
