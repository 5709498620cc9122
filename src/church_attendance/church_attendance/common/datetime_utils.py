from __future__ import annotations

from datetime import date, datetime

_MONTHS_PT = ("Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now().date()


def format_date_pt(value: date) -> str:
    """Format a date like ``05 Jan 2025`` with Portuguese month names."""
    return f"{value.day:02d} {_MONTHS_PT[value.month - 1]} {value.year}"
