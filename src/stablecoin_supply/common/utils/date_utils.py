"""
Date Utilities
==============

Timestamp conversions and calendar-month arithmetic on "YYYY-MM" period keys.
"""

import re
from datetime import UTC, datetime

PERIOD_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def from_unix_ms(timestamp_ms: int | float) -> datetime:
    """
    Convert Unix timestamp in milliseconds to datetime (UTC).

    Args:
        timestamp_ms: Unix timestamp in milliseconds

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def from_unix_seconds(timestamp_s: int | float | str) -> datetime:
    """Convert Unix timestamp in seconds (possibly a numeric string) to UTC datetime."""
    return datetime.fromtimestamp(float(timestamp_s), tz=UTC)


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 string, accepting a trailing 'Z'.

    Naive results are assumed to be UTC.
    """
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def utc_now() -> datetime:
    """
    Get current time in UTC.

    Returns:
        Current UTC datetime
    """
    return datetime.now(UTC)


def period_key(dt: datetime) -> str:
    """
    Calendar-month key ("YYYY-MM") of a datetime, evaluated in UTC.

    Args:
        dt: Datetime (naive values are assumed UTC)

    Returns:
        Period key string
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return f"{dt.year:04d}-{dt.month:02d}"


def parse_period_key(key: str) -> tuple[int, int]:
    """
    Split a period key into (year, month).

    Raises:
        ValueError: If key is not a valid "YYYY-MM" string
    """
    match = PERIOD_KEY_PATTERN.match(key)
    if not match:
        raise ValueError(f"Invalid period key: {key!r} (expected YYYY-MM)")
    return int(match.group(1)), int(match.group(2))


def month_index(key: str) -> int:
    """Absolute month number of a period key (year * 12 + month - 1)."""
    year, month = parse_period_key(key)
    return year * 12 + month - 1


def month_distance(start: str, end: str) -> int:
    """
    Number of calendar months from start to end.

    Example:
        >>> month_distance("2024-02", "2024-05")
        3
    """
    return month_index(end) - month_index(start)


def add_months(key: str, months: int) -> str:
    """
    Shift a period key by a number of months.

    Example:
        >>> add_months("2024-11", 3)
        '2025-02'
    """
    index = month_index(key) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"
