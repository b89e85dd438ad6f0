from __future__ import annotations

from datetime import date, datetime, timedelta


def parse_iso_date(value: str | date | None) -> date | None:
    """Parse a YYYY-MM-DD string (or the date part of an ISO timestamp)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def sunday_first_weekday(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def month_window(year: int, month: int) -> tuple[date, date]:
    """Last day of the previous month through the last day of the month."""
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    return first - timedelta(days=1), next_first - timedelta(days=1)
