from __future__ import annotations

import math
from typing import NamedTuple, Optional, Tuple

from .types import TimeConfig

UNIX_EPOCH_JDN = 2440588
SECONDS_PER_EARTH_DAY = 86400
# Host timestamps beyond this magnitude (JavaScript Date range) are rejected.
MAX_TIMESTAMP_SECONDS = 8.64e12


class UtcMoment(NamedTuple):
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int


def seconds_per_day(t: TimeConfig) -> int:
    return t.hours_in_day * t.minutes_in_hour * t.seconds_in_minute


def seconds_per_hour(t: TimeConfig) -> int:
    return t.minutes_in_hour * t.seconds_in_minute


def normalize_month(month: int, year: int, months_in_year: int) -> Tuple[int, int]:
    """Wrap a possibly out-of-range 1-based month into (month, year)."""
    dy, m0 = divmod(month - 1, months_in_year)
    return m0 + 1, year + dy


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def civil_from_jdn(jdn: int) -> Tuple[int, int, int]:
    """Fliegel-Van Flandern inverse (proleptic Gregorian), without ``datetime`` range limits."""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + (m // 10)
    return year, month, day


def utc_moment(timestamp: float) -> Optional[UtcMoment]:
    """
    Break a Unix timestamp (seconds) into UTC civil fields.
    Returns None for non-finite or out-of-range timestamps.
    """
    if not math.isfinite(timestamp) or abs(timestamp) > MAX_TIMESTAMP_SECONDS:
        return None
    days = math.floor(timestamp / SECONDS_PER_EARTH_DAY)
    sod = math.floor(timestamp - days * SECONDS_PER_EARTH_DAY)
    y, m, d = civil_from_jdn(days + UNIX_EPOCH_JDN)
    hour, rem = divmod(sod, 3600)
    minute, second = divmod(rem, 60)
    return UtcMoment(y, m, d, hour, minute, second)


def hours_to_time_string(hours: float, minutes_in_hour: int = 60) -> str:
    h = math.floor(hours)
    m = round((hours - h) * minutes_in_hour)
    if m == minutes_in_hour:
        return f"{h + 1:02d}:00"
    return f"{h:02d}:{m:02d}"


def time_string_to_hours(text: str, minutes_in_hour: int = 60) -> float:
    parts = text.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {text!r}. Expected HH:MM")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ValueError(f"Invalid time values: {text!r}") from e
    return hours + minutes / minutes_in_hour
