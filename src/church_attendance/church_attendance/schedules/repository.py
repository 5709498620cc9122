from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Schedule


class ScheduleRepository(Protocol):
    def list_recent(
        self,
        *,
        limit: int,
        before: Optional[date] = None,
        include_cancelled: bool = False,
    ) -> Sequence[Schedule]:
        """Most recent schedules, newest first."""

        raise NotImplementedError
