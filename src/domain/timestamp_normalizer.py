"""
Timestamp Normalizer Module

Canonicalizes the heterogeneous date/time strings exported by time clocks and
typed by hand into an unambiguous "YYYY-MM-DD HH:MM:SS" form, and provides the
small date/time helpers shared by the rest of the engine.

Normalization never raises: input that cannot be understood is passed through
best-effort and it is up to the caller to reject records with an empty result.
"""

import re
from datetime import date, datetime
from typing import Optional, Tuple

DEFAULT_TIME = "00:00:00"

# Quotes left over from spreadsheet exports
QUOTE_PATTERN = re.compile(r"['\"]")

# Zero-width space/joiners and BOM
ZERO_WIDTH_PATTERN = re.compile("[\u200B-\u200D\uFEFF]")

# "8H50" / "8h50" style times
HOUR_SEPARATOR_PATTERN = re.compile(r"[Hh]")


def _pad(value: str) -> str:
    return value.rjust(2, "0")


def _expand_year(year: str) -> str:
    return "20" + year if len(year) == 2 else year


def normalize_date(date_token: str) -> str:
    """
    Normalize a date token to YYYY-MM-DD.

    Handles formats like:
    - 05/03/2024, 5/3/24 - DD/MM/YYYY, 2-digit years expanded with "20"
    - 2024-03-05 - already ISO, kept as is
    - 05-03-2024 - DD-MM-YYYY
    Anything else is returned unchanged.
    """
    if "/" in date_token:
        parts = date_token.split("/")
        if len(parts) == 3:
            day, month, year = parts
            # Toujours forcer l'ISO pour éviter la confusion US/FR
            return f"{_expand_year(year)}-{_pad(month)}-{_pad(day)}"
    elif "-" in date_token:
        parts = date_token.split("-")
        if len(parts) == 3:
            if len(parts[0]) == 4:
                return date_token
            day, month, year = parts
            return f"{_expand_year(year)}-{_pad(month)}-{_pad(day)}"
    return date_token


def normalize_time(time_token: str) -> str:
    """Normalize a time token to HH:MM:SS, defaulting to 00:00:00."""
    time_token = HOUR_SEPARATOR_PATTERN.sub(":", time_token)
    parts = time_token.split(":")
    if len(parts) < 2:
        return DEFAULT_TIME
    seconds = parts[2] if len(parts) > 2 and parts[2] else "00"
    return f"{_pad(parts[0])}:{_pad(parts[1])}:{_pad(seconds[:2])}"


def normalize(raw: str) -> str:
    """
    Normalize one raw date/time string.

    Args:
        raw: Raw value such as '"05/03/2024 8H50"' or '2024-03-05T08:50:00'

    Returns:
        "YYYY-MM-DD HH:MM:SS" or a best-effort rendition; "" for empty input
    """
    if not raw:
        return ""

    cleaned = QUOTE_PATTERN.sub("", raw.strip())
    cleaned = ZERO_WIDTH_PATTERN.sub("", cleaned).strip()
    parts = cleaned.split()
    if not parts:
        return ""

    date_token = parts[0]
    time_token = parts[1] if len(parts) > 1 else DEFAULT_TIME

    # ISO 8601 "2024-03-05T08:50:00" en un seul bloc
    if len(date_token) > 10 and len(parts) == 1 and "T" in date_token:
        date_token, _, rest = date_token.partition("T")
        time_token = rest[:8] or DEFAULT_TIME

    return f"{normalize_date(date_token)} {normalize_time(time_token)}"


def split_timestamp(timestamp: str) -> Tuple[str, str]:
    """Split a normalized timestamp into its (date, time) parts."""
    parts = timestamp.split(" ")
    date_str = parts[0] if parts else ""
    time_str = parts[1] if len(parts) > 1 else ""
    return date_str, time_str


def to_minutes(time_str: Optional[str]) -> Optional[int]:
    """
    Convert "HH:MM" or "HH:MM:SS" to minutes since midnight.

    Returns:
        Minutes, or None when the value is missing or malformed
    """
    if not time_str:
        return None
    parts = time_str.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours < 0 or minutes < 0:
        return None
    return hours * 60 + minutes


def short_time(time_str: str) -> str:
    """Reduce "HH:MM:SS" to "HH:MM"."""
    return time_str[:5]


def parse_date(date_str: str) -> Optional[date]:
    """Parse "YYYY-MM-DD" into a date, or None when malformed."""
    try:
        return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        return None


def day_of_week(day: date) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday (stored settings convention)."""
    return (day.weekday() + 1) % 7


def month_key(date_str: str) -> str:
    """Return the "YYYY-MM" shard key of a date string, or "" when unusable."""
    if len(date_str) >= 7 and "-" in date_str:
        return date_str[:7]
    return ""
