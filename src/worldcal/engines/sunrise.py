"""
worldcal.engines.sunrise
------------------------
Season-driven sunrise and sunset.

Each season may carry sunrise/sunset clock times for its first day; a date
inside a season is interpolated linearly towards the next season's times by
its progress through the season. This is a storytelling model, not an
astronomical one: no latitude, no equation of time.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from ..core.diagnostics import WarningState
from ..core.engine import DayCountingEngine
from ..core.time import time_string_to_hours
from ..core.types import CalendarDate, CalendarDefinition, Season, SunTimes

logger = logging.getLogger(__name__)

# Baltimore-ish clock times, matched to seasons by name.
GREGORIAN_SEASON_TIMES = {
    "Winter": ("07:00", "16:45"),
    "Spring": ("06:30", "17:45"),
    "Summer": ("05:45", "20:15"),
    "Autumn": ("06:30", "19:30"),
    "Fall": ("06:30", "19:30"),
}


def default_times(calendar: CalendarDefinition) -> SunTimes:
    hours = calendar.time.hours_in_day if calendar.time else 24
    return SunTimes(sunrise=hours / 4, sunset=hours * 3 / 4)


def is_date_in_season(date: CalendarDate, season: Season, calendar: CalendarDefinition) -> bool:
    months = calendar.months or ()
    start_month = season.start_month
    end_month = season.end_month if season.end_month is not None else start_month
    start_day = season.start_day or 1
    if season.end_day is not None:
        end_day = season.end_day
    elif 1 <= end_month <= len(months):
        end_day = months[end_month - 1].days
    else:
        end_day = 31

    month, day = date.month, date.day
    if start_month > end_month:
        # crosses the year boundary
        return (
            (month == start_month and day >= start_day)
            or (month == end_month and day <= end_day)
            or month > start_month
            or month < end_month
        )
    if month < start_month or month > end_month:
        return False
    if month == start_month and day < start_day:
        return False
    if month == end_month and day > end_day:
        return False
    return True


def find_season_index(date: CalendarDate, calendar: CalendarDefinition) -> int:
    for i, season in enumerate(calendar.seasons):
        if is_date_in_season(date, season, calendar):
            return i
    return -1


def season_times(season: Season, calendar: CalendarDefinition) -> SunTimes:
    minutes = calendar.time.minutes_in_hour if calendar.time else 60
    pair: Optional[Tuple[str, str]] = None
    if season.sunrise and season.sunset:
        pair = (season.sunrise, season.sunset)
    elif season.name in GREGORIAN_SEASON_TIMES:
        pair = GREGORIAN_SEASON_TIMES[season.name]
    if pair is None:
        return default_times(calendar)
    try:
        return SunTimes(time_string_to_hours(pair[0], minutes), time_string_to_hours(pair[1], minutes))
    except ValueError as e:
        logger.warning("Calendar %s season %s: %s; using default day length", calendar.id, season.name, e)
        return default_times(calendar)


def season_progress(engine: DayCountingEngine, date: CalendarDate, current: Season, nxt: Season) -> float:
    """Fraction of ``current`` elapsed at ``date`` (0 on its first day)."""
    year = date.year
    start = engine.get_day_of_year(CalendarDate(year, current.start_month, current.start_day or 1))
    end = engine.get_day_of_year(CalendarDate(year, nxt.start_month, nxt.start_day or 1))
    today = engine.get_day_of_year(date)
    days_in_year = engine.get_year_length(year)

    total = end - start if end > start else days_in_year - start + end
    into = today - start if today >= start else days_in_year - start + today
    return into / total if total > 0 else 0.0


def sunrise_sunset(
    engine: DayCountingEngine,
    date: CalendarDate,
    warnings: Optional[WarningState] = None,
) -> SunTimes:
    cal = engine.calendar
    seasons: Sequence[Season] = cal.seasons
    if not seasons:
        if warnings is not None and warnings.should_warn(f"seasons:{cal.id}"):
            logger.warning("Calendar %s has no seasons; sunrise/sunset use a fixed 25%%/75%% split", cal.id)
        return default_times(cal)

    idx = find_season_index(date, cal)
    if idx < 0:
        return default_times(cal)
    current = seasons[idx]
    nxt = seasons[(idx + 1) % len(seasons)]

    a = season_times(current, cal)
    b = season_times(nxt, cal)
    p = season_progress(engine, date, current, nxt)
    return SunTimes(
        sunrise=a.sunrise + (b.sunrise - a.sunrise) * p,
        sunset=a.sunset + (b.sunset - a.sunset) * p,
    )
