from __future__ import annotations

from typing import Any, Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_status(value: Any) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid attendance status: {value!r}") from None


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None
    if parsed <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return parsed


def optional_positive_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_id(value, field_name)


def clean_notes(value: Any) -> Optional[str]:
    """Strip a free-text note; blank notes are stored as ``None``."""

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("notes must be a string")
    return value.strip() or None
