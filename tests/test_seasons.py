# tests/test_seasons.py

import logging

import pytest

from worldcal.core.defaults import GREGORIAN
from worldcal.core.diagnostics import WarningState
from worldcal.core.time import hours_to_time_string, time_string_to_hours
from worldcal.core.types import CalendarDate, CalendarDefinition, Season, TimeConfig
from worldcal.engines.calendar import CalendarEngine
from worldcal.engines.specs import FESTIVAL


@pytest.fixture(scope="module")
def greg():
    return CalendarEngine(GREGORIAN)


def test_season_lookup(greg):
    assert greg.get_season(CalendarDate(2024, 7, 4)).name == "Summer"
    assert greg.get_season(CalendarDate(2024, 1, 15)).name == "Winter"
    assert greg.get_season(CalendarDate(2024, 12, 25)).name == "Winter"
    assert greg.get_season(CalendarDate(2024, 3, 20)).name == "Spring"


def test_sunrise_at_season_start(greg):
    sun = greg.get_sunrise_sunset(CalendarDate(2024, 12, 21))
    assert sun.sunrise == pytest.approx(7.0)
    assert sun.sunset == pytest.approx(16.75)


def test_sunrise_interpolates_across_year_boundary(greg):
    # Winter runs from Dec 21 (day 356 of 2024) to Mar 20 (day 80)
    p = 25 / 90
    sun = greg.get_sunrise_sunset(CalendarDate(2024, 1, 15))
    assert sun.sunrise == pytest.approx(7.0 + (6.5 - 7.0) * p)
    assert sun.sunset == pytest.approx(16.75 + (17.75 - 16.75) * p)


def test_explicit_season_times():
    eng = CalendarEngine(FESTIVAL)
    sun = eng.get_sunrise_sunset(CalendarDate(1492, 6, 1))
    assert sun.sunrise == pytest.approx(5.25)
    assert sun.sunset == pytest.approx(20.75)


def test_no_seasons_uses_default_split_and_warns_once(caplog):
    caplog.set_level(logging.WARNING)
    warnings = WarningState()
    eng = CalendarEngine(CalendarDefinition(id="seasonless", time=TimeConfig(hours_in_day=20)), warnings=warnings)
    for day in (1, 2, 3):
        sun = eng.get_sunrise_sunset(CalendarDate(5, 1, day))
        assert (sun.sunrise, sun.sunset) == (5.0, 15.0)
    assert sum("no seasons" in r.getMessage() for r in caplog.records) == 1
    assert warnings.has_warned("seasons:seasonless")


def test_bad_time_string_falls_back(caplog):
    caplog.set_level(logging.WARNING)
    cal = CalendarDefinition(id="bad-times", seasons=(Season("Only", 1, 1, 12, 31, sunrise="dawn", sunset="dusk"),))
    eng = CalendarEngine(cal)
    sun = eng.get_sunrise_sunset(CalendarDate(5, 6, 1))
    assert (sun.sunrise, sun.sunset) == (6.0, 18.0)
    assert any("Invalid time" in r.getMessage() for r in caplog.records)


def test_time_string_helpers():
    assert time_string_to_hours("06:30") == 6.5
    assert time_string_to_hours("06:50", minutes_in_hour=100) == 6.5
    assert hours_to_time_string(6.5) == "06:30"
    assert hours_to_time_string(6.9999) == "07:00"
    with pytest.raises(ValueError):
        time_string_to_hours("630")
