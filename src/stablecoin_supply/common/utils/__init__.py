"""Utility functions for common operations."""

from .date_utils import (
    add_months,
    from_unix_ms,
    from_unix_seconds,
    month_distance,
    parse_iso_datetime,
    parse_period_key,
    period_key,
    utc_now,
)

__all__ = [
    "add_months",
    "from_unix_ms",
    "from_unix_seconds",
    "month_distance",
    "parse_iso_datetime",
    "parse_period_key",
    "period_key",
    "utc_now",
]
