"""
worldcal.engines.weeks
----------------------
Week-of-month numbering for calendars with a ``weeks`` section.

Only month-based weeks are numbered here; year-based weeks span month
boundaries and always report None.
"""

from __future__ import annotations
from typing import Optional

from ..core.engine import DayCountingEngine
from ..core.time import ordinal
from ..core.types import CalendarDate, WeekName


def week_of_month(engine: DayCountingEngine, date: CalendarDate) -> Optional[int]:
    cal = engine.calendar
    weeks = cal.weeks
    if weeks is None or weeks.type == "year-based":
        return None

    days_per_week = weeks.days_per_week or len(cal.weekdays or ()) or 7
    raw_week = (date.day - 1) // days_per_week + 1

    month_days = engine.get_month_length(date.month, date.year)
    if month_days % days_per_week == 0:
        return raw_week

    handling = weeks.remainder_handling or "partial-last"
    expected = weeks.per_month if weeks.per_month is not None else month_days // days_per_week

    if handling == "extend-last" and raw_week == expected + 1:
        # trailing partial week folds into the last full one
        return expected
    if handling == "none" and raw_week > expected:
        return None
    return raw_week


def week_info(engine: DayCountingEngine, date: CalendarDate) -> Optional[WeekName]:
    week = week_of_month(engine, date)
    weeks = engine.calendar.weeks
    if week is None or weeks is None:
        return None

    if 0 < week <= len(weeks.names):
        return weeks.names[week - 1]

    pattern = weeks.naming_pattern or "numeric"
    if pattern == "ordinal":
        return WeekName(name=f"{ordinal(week)} Week", abbreviation=str(week))
    if pattern == "numeric":
        return WeekName(name=f"Week {week}", abbreviation=str(week))
    return None
