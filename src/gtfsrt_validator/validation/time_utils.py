"""Helpers for GTFS time, date and POSIX timestamp values."""

import re
from datetime import datetime

# HH:MM:SS with two-digit hours; hours may exceed 23 for trips past midnight
TIME_FORMAT_RE = re.compile(r"^([0-9]{2}):([0-5][0-9]):([0-5][0-9])$")
DATE_FORMAT_RE = re.compile(r"^[0-9]{8}$")

# Window of plausible POSIX timestamps in seconds (2012-01-01 .. 2100-01-01).
# Values outside it are usually milliseconds or local-time encodings.
MIN_POSIX_TIME = 1325376000
MAX_POSIX_TIME = 4102444800


def parse_gtfs_time(time_str: str) -> tuple[int, int, int]:
    """Parse a GTFS time string into hours, minutes, seconds.

    GTFS times can exceed 24:00:00 for trips that extend past midnight.
    For example, "25:30:00" means 1:30 AM the next day.

    Args:
        time_str: Time string in HH:MM:SS format (hours can exceed 24).

    Returns:
        Tuple of (hours, minutes, seconds).

    Raises:
        ValueError: If the time string is invalid.
    """
    parts = time_str.strip().split(":")
    if len(parts) != 3:
        raise ValueError(f"Invalid GTFS time format: {time_str}")

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2])
    except ValueError as e:
        raise ValueError(f"Invalid GTFS time format: {time_str}") from e

    return hours, minutes, seconds


def gtfs_time_to_seconds(time_str: str) -> int:
    """Convert a GTFS time string to seconds since midnight.

    Returns:
        Total seconds since midnight (can exceed 86400 for next-day times).
    """
    hours, minutes, seconds = parse_gtfs_time(time_str)
    return hours * 3600 + minutes * 60 + seconds


def seconds_to_clock(total_seconds: int) -> str:
    """Format seconds since midnight as HH:MM:SS without wrapping at 24h.

    Example: 91800 -> "25:30:00".
    """
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def is_valid_time_format(value: str) -> bool:
    """True if value is a strict HH:MM:SS string ("25:30:00" is valid, "1:30:00" is not)."""
    return TIME_FORMAT_RE.fullmatch(value) is not None


def is_valid_date_format(value: str) -> bool:
    """True if value is YYYYMMDD and names a real calendar date."""
    if DATE_FORMAT_RE.fullmatch(value) is None:
        return False
    try:
        datetime.strptime(value, "%Y%m%d")
    except ValueError:
        return False
    return True


def is_posix_time(timestamp: int) -> bool:
    """True if timestamp looks like POSIX seconds rather than milliseconds."""
    return MIN_POSIX_TIME <= timestamp <= MAX_POSIX_TIME
