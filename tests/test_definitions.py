# tests/test_definitions.py

import logging
import math

import pytest

from worldcal.core.defaults import GREGORIAN, GREGORIAN_MONTHS, apply_gregorian_defaults
from worldcal.core.diagnostics import WarningState
from worldcal.core.errors import CalendarDefinitionError
from worldcal.core.types import CalendarDate, CalendarDefinition, LeapYearRule, TimeOfDay
from worldcal.engines.calendar import CalendarEngine
from worldcal.engines.compat import WeekdayOffset
from worldcal.engines.specs import FESTIVAL


MOONLESS = {
    "id": "tiny",
    "year": {"epoch": 10, "currentYear": 12, "startDay": 2, "suffix": " AT"},
    "leapYear": {"rule": "custom", "interval": 3, "offset": 1, "month": "Frost", "extraDays": 2},
    "months": [{"name": "Frost", "days": 20, "abbreviation": "Fr"}, {"name": "Thaw", "days": 25}],
    "weekdays": [{"name": "Odd"}, {"name": "Even"}, {"name": "Rest"}],
    "intercalary": [{"name": "Turn", "after": "Frost", "countsForWeekdays": False}],
    "time": {"hoursInDay": 20, "minutesInHour": 50, "secondsInMinute": 50},
    "worldTime": {"interpretation": "epoch-based"},
    "weeks": {"type": "month-based", "daysPerWeek": 5, "namingPattern": "ordinal"},
}


def test_from_dict():
    cal = CalendarDefinition.from_dict(MOONLESS)
    assert cal.year.epoch == 10
    assert cal.leap_year == LeapYearRule(rule="custom", interval=3, offset=1, month="Frost", extra_days=2)
    assert cal.months[0].abbreviation == "Fr"
    assert cal.intercalary[0].counts_for_weekdays is False
    assert cal.time.seconds_in_minute == 50
    assert cal.month_index("Thaw") == 2
    assert cal.month_index("Nope") == 0


@pytest.mark.parametrize("definition", [GREGORIAN, FESTIVAL], ids=["gregorian", "festival"])
def test_to_dict_is_inverse_of_from_dict(definition):
    assert CalendarDefinition.from_dict(definition.to_dict()) == definition


def test_from_dict_rejects_bad_input():
    with pytest.raises(CalendarDefinitionError):
        CalendarDefinition.from_dict(["not", "a", "mapping"])
    with pytest.raises(CalendarDefinitionError):
        CalendarDefinition.from_dict({"id": "x", "months": [{"name": "A", "days": "many"}]})
    with pytest.raises(CalendarDefinitionError):
        CalendarDefinition.from_dict({"id": "x", "leapYear": {"rule": "lunar"}})


def test_missing_sections_warn_once_per_section(caplog):
    caplog.set_level(logging.WARNING)
    warnings = WarningState()
    bare = CalendarDefinition(id="bare")
    merged = apply_gregorian_defaults(bare, warnings)
    assert merged.months == GREGORIAN_MONTHS
    assert merged.leap_year.rule == "gregorian"
    assert merged.intercalary == ()
    first = len(caplog.records)
    assert first == 6

    apply_gregorian_defaults(bare, warnings)
    assert len(caplog.records) == first
    assert warnings.has_warned("defaults:bare:months")

    warnings.reset()
    apply_gregorian_defaults(bare, warnings)
    assert len(caplog.records) == 2 * first


def test_leap_rule_none_is_kept():
    merged = apply_gregorian_defaults(CalendarDefinition(id="flat", leap_year=LeapYearRule(rule="none")))
    assert merged.leap_year == LeapYearRule(rule="none")


def test_engine_from_partial_definition_behaves_like_gregorian():
    eng = CalendarEngine(CalendarDefinition(id="partial"))
    assert eng.get_year_length(2024) == 366
    assert eng.calculate_weekday(2024, 1, 1) == 1


def test_tiny_calendar():
    eng = CalendarEngine(CalendarDefinition.from_dict(MOONLESS))
    # leap when (year - 1) % 3 == 0; Frost grows by two days
    assert eng.is_leap_year(10)
    assert eng.get_month_lengths(10) == [22, 25]
    assert eng.get_year_length(10) == 48
    assert eng.get_year_length(11) == 46

    d = eng.world_time_to_date(0)
    assert (d.year, d.month, d.day, d.weekday) == (10, 1, 1, 2)
    assert eng.days_to_date(22).intercalary == "Turn"
    assert eng.days_to_date(23).weekday == (eng.days_to_date(21).weekday + 1) % 3
    assert d.to_short_string(eng.calendar) == "1 Fr 10 AT"


def test_update_calendar_rebuilds():
    eng = CalendarEngine(GREGORIAN)
    assert eng.get_year_length(2023) == 365
    eng.update_calendar(FESTIVAL)
    assert eng.calendar.id == "festival"
    assert eng.get_year_length(1492) == 366
    copy = eng.get_calendar()
    assert copy == eng.calendar
    assert copy is not eng.calendar


def test_weekday_offset_hook():
    plain = CalendarEngine(GREGORIAN)
    shifted = CalendarEngine(GREGORIAN, weekday_adjustment=WeekdayOffset(2))
    for n in (0, 1, 100, 739251):
        assert shifted.days_to_date(n).weekday == (plain.days_to_date(n).weekday + 2) % 7
    # day counting is untouched
    assert shifted.date_to_days(CalendarDate(2024, 1, 1)) == 739251


def test_calendar_date_helpers():
    a = CalendarDate(2024, 1, 1, 1, time=TimeOfDay(10, 0, 0))
    b = a.replace(time=TimeOfDay(11, 0, 0))
    assert a.is_before(b) and b.is_after(a)
    assert a.compare_to(a) == 0
    assert CalendarDate.from_dict(a.to_dict()) == a
    assert a.to_long_string(GREGORIAN) == "Monday, 1st January 2024 10:00:00"
    fest = CalendarDate(1492, 1, 1, intercalary="Midwinter")
    assert fest.is_intercalary
    assert fest.to_date_string(FESTIVAL) == "Midwinter (day 1), 1492 DR"
    assert not CalendarDate(math.nan, 1, 1).is_valid
