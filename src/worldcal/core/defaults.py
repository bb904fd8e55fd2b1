"""
worldcal.core.defaults
----------------------
The Gregorian reference calendar and the section-by-section merge that keeps
partially specified calendars usable.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .diagnostics import WarningState
from .types import (
    CalendarDefinition,
    LeapYearRule,
    Month,
    Moon,
    MoonPhase,
    MoonReference,
    Season,
    TimeConfig,
    Weekday,
    YearConfig,
)

logger = logging.getLogger(__name__)

GREGORIAN_YEAR = YearConfig(epoch=0, current_year=2024, start_day=6)
GREGORIAN_LEAP_YEAR = LeapYearRule(rule="gregorian", month="February", extra_days=1)
GREGORIAN_TIME = TimeConfig(hours_in_day=24, minutes_in_hour=60, seconds_in_minute=60)

GREGORIAN_MONTHS = (
    Month("January", 31, "Jan"),
    Month("February", 28, "Feb"),
    Month("March", 31, "Mar"),
    Month("April", 30, "Apr"),
    Month("May", 31, "May"),
    Month("June", 30, "Jun"),
    Month("July", 31, "Jul"),
    Month("August", 31, "Aug"),
    Month("September", 30, "Sep"),
    Month("October", 31, "Oct"),
    Month("November", 30, "Nov"),
    Month("December", 31, "Dec"),
)

# Day 1 of year 0 (proleptic Gregorian) is a Saturday, index 6 below.
GREGORIAN_WEEKDAYS = (
    Weekday("Sunday", "Sun"),
    Weekday("Monday", "Mon"),
    Weekday("Tuesday", "Tue"),
    Weekday("Wednesday", "Wed"),
    Weekday("Thursday", "Thu"),
    Weekday("Friday", "Fri"),
    Weekday("Saturday", "Sat"),
)

GREGORIAN = CalendarDefinition(
    id="gregorian",
    year=GREGORIAN_YEAR,
    leap_year=GREGORIAN_LEAP_YEAR,
    months=GREGORIAN_MONTHS,
    weekdays=GREGORIAN_WEEKDAYS,
    intercalary=(),
    time=GREGORIAN_TIME,
    moons=(
        Moon(
            name="Luna",
            cycle_length=29.53059,
            first_new_moon=MoonReference(2000, 1, 6),
            phases=(
                MoonPhase("New Moon", 1, single_day=True, icon="new"),
                MoonPhase("Waxing Crescent", 6.38265, icon="waxing-crescent"),
                MoonPhase("First Quarter", 1, single_day=True, icon="first-quarter"),
                MoonPhase("Waxing Gibbous", 6.38265, icon="waxing-gibbous"),
                MoonPhase("Full Moon", 1, single_day=True, icon="full"),
                MoonPhase("Waning Gibbous", 6.38265, icon="waning-gibbous"),
                MoonPhase("Last Quarter", 1, single_day=True, icon="last-quarter"),
                MoonPhase("Waning Crescent", 6.38264, icon="waning-crescent"),
            ),
        ),
    ),
    seasons=(
        Season("Winter", start_month=12, start_day=21, end_month=3, end_day=19),
        Season("Spring", start_month=3, start_day=20, end_month=6, end_day=20),
        Season("Summer", start_month=6, start_day=21, end_month=9, end_day=21),
        Season("Autumn", start_month=9, start_day=22, end_month=12, end_day=20),
    ),
)


def _merge_leap_year(leap: Optional[LeapYearRule]) -> LeapYearRule:
    if leap is None:
        return GREGORIAN_LEAP_YEAR
    if leap.rule == "none":
        return LeapYearRule(rule="none")
    if leap.month is None:
        return replace(leap, month=GREGORIAN_LEAP_YEAR.month)
    return leap


def apply_gregorian_defaults(
    calendar: CalendarDefinition,
    warnings: Optional[WarningState] = None,
) -> CalendarDefinition:
    """
    Fill every missing core section from the Gregorian reference, warning
    once per calendar and section. Never raises.
    """
    warnings = warnings if warnings is not None else WarningState()

    def missing(section: str) -> None:
        if warnings.should_warn(f"defaults:{calendar.id}:{section}"):
            logger.warning("Calendar %s missing %s data; using Gregorian defaults", calendar.id, section)

    if calendar.year is None:
        missing("year")
    if calendar.leap_year is None:
        missing("leapYear")
    if not calendar.months:
        missing("months")
    if not calendar.weekdays:
        missing("weekdays")
    if calendar.intercalary is None:
        missing("intercalary")
    if calendar.time is None:
        missing("time")

    return replace(
        calendar,
        year=calendar.year if calendar.year is not None else GREGORIAN_YEAR,
        leap_year=_merge_leap_year(calendar.leap_year),
        time=calendar.time if calendar.time is not None else GREGORIAN_TIME,
        # An empty month or weekday list would leave nothing to count with.
        months=calendar.months or GREGORIAN_MONTHS,
        weekdays=calendar.weekdays or GREGORIAN_WEEKDAYS,
        intercalary=calendar.intercalary if calendar.intercalary is not None else (),
    )
