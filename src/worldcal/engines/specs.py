"""
worldcal.engines.specs
----------------------
Built-in calendar definitions.

``gregorian`` is the reference calendar every partial definition falls back
on. ``festival`` is a thirty-day-month calendar whose year is completed by
festival days that sit between months and do not advance the week.
"""

from __future__ import annotations

from typing import Dict

from ..core.defaults import GREGORIAN
from ..core.types import (
    CalendarDefinition,
    Intercalary,
    LeapYearRule,
    Month,
    Moon,
    MoonPhase,
    MoonReference,
    Season,
    TimeConfig,
    Weekday,
    WeeksConfig,
    YearConfig,
)

# ============================================================
# FESTIVAL CALENDAR
# ============================================================

FESTIVAL_MONTH_NAMES = (
    "Deepwinter", "Thaw", "Seedtime", "Rainfall", "Bloom", "Highsun",
    "Harvestide", "Reaping", "Leaffall", "Rotting", "Drawing", "Longnight",
)

# Ten-day weeks ("tendays"), three per month.
FESTIVAL_WEEKDAYS = tuple(
    Weekday(name, name[:3])
    for name in ("First-day", "Second-day", "Third-day", "Fourth-day", "Fifth-day",
                 "Sixth-day", "Seventh-day", "Eighth-day", "Ninth-day", "Tenth-day")
)

FESTIVALS = (
    Intercalary("Midwinter", after="Deepwinter", counts_for_weekdays=False),
    Intercalary("Greengrass", after="Bloom", counts_for_weekdays=False),
    Intercalary("Midsummer", after="Highsun", counts_for_weekdays=False),
    Intercalary("Shieldmeet", after="Highsun", leap_year_only=True, counts_for_weekdays=False),
    Intercalary("Highharvest", after="Leaffall", counts_for_weekdays=False),
    Intercalary("Feast of the Moon", before="Longnight", counts_for_weekdays=False),
)

# 365 days, 366 every fourth year; the moon cycle matches the mean year / 12.
PALE_CYCLE = 30.4375
_QUARTER = 6.609375

FESTIVAL = CalendarDefinition(
    id="festival",
    year=YearConfig(epoch=0, current_year=1492, start_day=0, suffix=" DR"),
    # the leap day is Shieldmeet; no month grows
    leap_year=LeapYearRule(rule="custom", interval=4, offset=0, month="Highsun", extra_days=0),
    months=tuple(Month(name, 30, name[:4]) for name in FESTIVAL_MONTH_NAMES),
    weekdays=FESTIVAL_WEEKDAYS,
    intercalary=FESTIVALS,
    time=TimeConfig(hours_in_day=24, minutes_in_hour=60, seconds_in_minute=60),
    weeks=WeeksConfig(type="month-based", days_per_week=10, per_month=3, naming_pattern="ordinal"),
    moons=(
        Moon(
            name="Pale",
            cycle_length=PALE_CYCLE,
            first_new_moon=MoonReference(1372, 1, 1),
            phases=(
                MoonPhase("New", 1, single_day=True, icon="new"),
                MoonPhase("Waxing Crescent", _QUARTER, icon="waxing-crescent"),
                MoonPhase("First Quarter", 1, single_day=True, icon="first-quarter"),
                MoonPhase("Waxing Gibbous", _QUARTER, icon="waxing-gibbous"),
                MoonPhase("Full", 1, single_day=True, icon="full"),
                MoonPhase("Waning Gibbous", _QUARTER, icon="waning-gibbous"),
                MoonPhase("Last Quarter", 1, single_day=True, icon="last-quarter"),
                MoonPhase("Waning Crescent", _QUARTER, icon="waning-crescent"),
            ),
            color="#c0c8d8",
        ),
    ),
    seasons=(
        Season("Winter", start_month=11, start_day=1, end_month=2, end_day=30, sunrise="07:30", sunset="16:30"),
        Season("Spring", start_month=3, start_day=1, end_month=5, end_day=30, sunrise="06:15", sunset="18:45"),
        Season("Summer", start_month=6, start_day=1, end_month=8, end_day=30, sunrise="05:15", sunset="20:45"),
        Season("Autumn", start_month=9, start_day=1, end_month=10, end_day=30, sunrise="06:30", sunset="18:00"),
    ),
)

ALL_SPECS: Dict[str, CalendarDefinition] = {
    "gregorian": GREGORIAN,
    "festival": FESTIVAL,
}
