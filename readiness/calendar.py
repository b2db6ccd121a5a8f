"""
Calendar and date utilities.

Pure helpers for day-level arithmetic. Nothing in here reads the system clock:
"now" is always passed in by the caller and converted to the worker's zone.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    """
    Normalize to a calendar day, dropping any time component.
    Accepts date, datetime, 'YYYY-MM-DD' or an ISO timestamp string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.split("T")[0].strip())
    raise TypeError(f"Cannot interpret {value!r} as a date")


def format_date(day: date) -> str:
    return day.isoformat()


def date_range(start: date, end: date) -> Iterator[date]:
    """Every day from start to end, both inclusive. Empty if end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative if end is earlier)."""
    return (end - start).days


def is_within(day: date, start: date, end: Optional[date]) -> bool:
    """True if start <= day <= end, with end=None meaning open-ended."""
    if day < start:
        return False
    return end is None or day <= end


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up an IANA zone, falling back to UTC for unknown names."""
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error(f"Invalid timezone '{name}', falling back to UTC")
        return ZoneInfo("UTC")


def local_now(now: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Express an instant in the worker's zone.
    Naive datetimes are taken to already be local wall-clock time.
    """
    if now.tzinfo is None:
        return now
    return now.astimezone(resolve_timezone(tz_name))


def local_today(now: datetime, tz_name: Optional[str] = None) -> date:
    return local_now(now, tz_name).date()


def weekday_name(day: date) -> str:
    return day.strftime("%A")


def format_for_display(day: date) -> str:
    """e.g. 'Monday, January 15, 2024'."""
    return f"{weekday_name(day)}, {day.strftime('%B')} {day.day}, {day.year}"
