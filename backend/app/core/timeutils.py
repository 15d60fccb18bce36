"""
Date and time helpers.

Schedule times are built from a calendar date plus an ``HH:mm`` wall-clock
pair and always interpreted as UTC, never the server's local zone.
"""
import re
from datetime import date, datetime, time, timezone
from typing import Optional

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string. Raises ValueError on anything else."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("date must be YYYY-MM-DD")
    return date.fromisoformat(value)


def parse_clock(value: str) -> time:
    """Parse an ``HH:mm`` string. Raises ValueError on anything else."""
    match = TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError("time must be HH:mm")
    return time(int(match.group(1)), int(match.group(2)))


def combine_utc(day: date, clock: str) -> datetime:
    return datetime.combine(day, parse_clock(clock), tzinfo=timezone.utc)
