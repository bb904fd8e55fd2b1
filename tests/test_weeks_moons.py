# tests/test_weeks_moons.py

import logging

import pytest

from worldcal.core.defaults import GREGORIAN
from worldcal.core.types import (
    CalendarDate,
    CalendarDefinition,
    LeapYearRule,
    Month,
    Moon,
    MoonPhase,
    MoonReference,
    Weekday,
    WeekName,
    WeeksConfig,
    YearConfig,
)
from worldcal.engines.calendar import CalendarEngine
from worldcal.engines.moons import cycle_position, phase_at
from worldcal.engines.specs import FESTIVAL


def long_month(weeks, moons=()):
    return CalendarEngine(CalendarDefinition(
        id="long-month",
        year=YearConfig(epoch=0, current_year=0, start_day=0),
        leap_year=LeapYearRule(rule="none"),
        months=(Month("Long", 37),),
        weekdays=tuple(Weekday(f"D{i}") for i in range(9)),
        intercalary=(),
        weeks=weeks,
        moons=moons,
    ))


@pytest.mark.parametrize(
    "handling,expected",
    [("partial-last", 5), ("extend-last", 4), ("none", None)],
)
def test_remainder_handling(handling, expected):
    eng = long_month(WeeksConfig(days_per_week=9, remainder_handling=handling))
    assert eng.get_week_of_month(CalendarDate(0, 1, 37)) == expected
    assert eng.get_week_of_month(CalendarDate(0, 1, 36)) == 4
    assert eng.get_week_of_month(CalendarDate(0, 1, 1)) == 1


def test_no_weeks_section():
    eng = CalendarEngine(GREGORIAN)
    assert eng.get_week_of_month(CalendarDate(2024, 1, 10)) is None
    assert eng.get_week_info(CalendarDate(2024, 1, 10)) is None


def test_year_based_weeks_are_not_numbered():
    eng = long_month(WeeksConfig(type="year-based", days_per_week=9))
    assert eng.get_week_of_month(CalendarDate(0, 1, 10)) is None


def test_week_names():
    names = (WeekName("Ice"), WeekName("Fire"))
    eng = long_month(WeeksConfig(days_per_week=9, names=names, naming_pattern="numeric"))
    assert eng.get_week_info(CalendarDate(0, 1, 1)) == WeekName("Ice")
    assert eng.get_week_info(CalendarDate(0, 1, 10)) == WeekName("Fire")
    assert eng.get_week_info(CalendarDate(0, 1, 19)).name == "Week 3"

    eng = long_month(WeeksConfig(days_per_week=9, naming_pattern="custom"))
    assert eng.get_week_info(CalendarDate(0, 1, 19)) is None


def test_festival_tendays():
    eng = CalendarEngine(FESTIVAL)
    assert eng.get_week_info(CalendarDate(1492, 1, 25)).name == "3rd Week"
    assert eng.get_week_info(CalendarDate(1492, 1, 1)).name == "1st Week"


# ------------------------------------------------------------
# moons
# ------------------------------------------------------------

HALVES = Moon(
    name="Halves",
    cycle_length=29.5,
    first_new_moon=MoonReference(0, 1, 1),
    phases=(MoonPhase("Dark", 14.75), MoonPhase("Bright", 14.75)),
)


@pytest.mark.parametrize(
    "elapsed,index",
    [(0, 0), (14, 0), (15, 1), (29, 1), (30, 0), (-1, 1), (-15, 0), (295, 0)],
)
def test_phase_boundaries(elapsed, index):
    assert phase_at(HALVES, elapsed).phase_index == index


def test_boundary_within_float_noise_belongs_to_next_phase():
    info = phase_at(HALVES, 14.75 - 1e-9)
    assert info.phase_index == 1
    assert info.day_in_phase_exact == 0


def test_phase_details():
    info = phase_at(HALVES, -1)
    assert info.day_in_phase == 13
    assert info.day_in_phase_exact == pytest.approx(13.75)
    assert info.days_until_next == 1
    assert info.days_until_next_exact == pytest.approx(1.0)
    assert info.phase_progress == pytest.approx(13.75 / 14.75)


def test_cycle_position_is_normalised():
    assert cycle_position(-29.5, 29.5) == 0.0
    assert 0 <= cycle_position(-1e6, 29.5) < 29.5


def test_engine_moon_queries():
    eng = long_month(None, moons=(HALVES,))
    infos = eng.get_moon_phase_info(CalendarDate(0, 1, 16))
    assert [i.phase.name for i in infos] == ["Bright"]
    assert eng.get_moon_phase_info(CalendarDate(0, 1, 16), "Other") == []
    assert eng.calculate_moon_phase_for_date(HALVES, CalendarDate(0, 1, 1)).phase.name == "Dark"
    assert eng.get_all_moons() == [HALVES]
    assert eng.get_all_moons(CalendarDate(0, 1, 1))[0].phase.name == "Dark"
    assert eng.get_current_moon_phases()[0].phase.name == "Dark"
    assert eng.get_moon_phase_at_world_time(15 * 86400)[0].phase.name == "Bright"


def test_degenerate_moons_are_skipped(caplog):
    caplog.set_level(logging.WARNING)
    broken = Moon("Broken", 0, MoonReference(0, 1, 1), phases=(MoonPhase("Only", 1),))
    empty = Moon("Empty", 10, MoonReference(0, 1, 1))
    eng = long_month(None, moons=(broken, HALVES, empty))
    infos = eng.get_moon_phase_info(CalendarDate(0, 1, 3))
    assert [i.moon.name for i in infos] == ["Halves"]
    eng.get_moon_phase_info(CalendarDate(0, 1, 4))
    assert sum("Broken" in r.getMessage() for r in caplog.records) == 1


def test_gregorian_reference_new_moon():
    eng = CalendarEngine(GREGORIAN)
    assert eng.get_moon_phase_info(CalendarDate(2000, 1, 6))[0].phase.name == "New Moon"
    assert eng.get_moon_phase_info(CalendarDate(2000, 1, 21))[0].phase.name == "Full Moon"


def test_invalid_date_has_no_moon_phases():
    eng = CalendarEngine(GREGORIAN)
    assert eng.get_moon_phase_info(eng.world_time_to_date(0, float("inf"))) == []
