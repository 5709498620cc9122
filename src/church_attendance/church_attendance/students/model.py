from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import StudentStatus


@dataclass(frozen=True)
class Student:
    """Domain entity: a roster member ("pré") or a one-off visitor."""

    student_id: int
    name: str
    is_visitor: bool = False
    status: StudentStatus = StudentStatus.ACTIVE
