from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class ServiceTime:
    """One of the fixed weekly slots (e.g. 9h, 11h) a lesson runs at."""

    service_time_id: int
    time: time
    name: str
    display_order: int = 0
