"""Timestamp and calendar date formatting utilities."""

from datetime import date, datetime
from typing import Optional, Union


def now() -> str:
    """Compact timestamp for directory names (e.g., "20261019_142501")."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, for event logs."""
    return datetime.now().isoformat()


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Coerce a stored date value into a date.

    Accepts date/datetime objects and ISO 8601 strings (with or without a time
    component and a trailing "Z"). Anything unparseable yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        text = str(value).strip().replace("Z", "+00:00")
        return datetime.fromisoformat(text).date()
    except ValueError:
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None


def format_long_date(value: Union[str, date, datetime, None]) -> str:
    """Format a date as "January 5, 2026", or "" when missing."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def format_short_date(value: Union[str, date, datetime, None]) -> str:
    """Format a date as "Jan 5, 2026", or "" when missing."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return f"{parsed:%b} {parsed.day}, {parsed.year}"
