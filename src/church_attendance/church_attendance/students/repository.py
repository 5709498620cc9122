from __future__ import annotations

from typing import Protocol, Sequence


class StudentRepository(Protocol):
    def list_active_roster_ids(self) -> Sequence[int]:
        """Ids of active, non-visitor students."""

        raise NotImplementedError
