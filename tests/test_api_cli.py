# tests/test_api_cli.py

import json

import pytest

import worldcal
from worldcal import api
from worldcal._bootstrap import build_registry
from worldcal.cli import main
from worldcal.core.errors import CalendarDefinitionError, UnknownCalendarError
from worldcal.core.types import CalendarDate
from worldcal.engines.specs import FESTIVAL


@pytest.fixture
def fresh_registry():
    """Give each test its own registry so registrations do not leak."""
    saved = api._registry
    api.set_registry(build_registry())
    yield
    api.set_registry(saved)


@pytest.fixture
def calendar_file(tmp_path):
    path = tmp_path / "festival.json"
    path.write_text(json.dumps(FESTIVAL.to_dict()), encoding="utf-8")
    return path


def test_builtin_calendars(fresh_registry):
    assert worldcal.list_calendars() == ["festival", "gregorian"]
    assert worldcal.calendar_info("festival")["months"] == 12


def test_unknown_calendar(fresh_registry):
    with pytest.raises(UnknownCalendarError):
        worldcal.get_engine("nope")
    with pytest.raises(KeyError):
        worldcal.get_engine("nope")


def test_register_calendar(fresh_registry):
    eng = worldcal.register_calendar({"id": "mini", "months": [{"name": "Only", "days": 40}]})
    assert "mini" in worldcal.list_calendars()
    assert worldcal.get_engine("mini") is eng
    assert eng.get_year_length(3) == 40

    with pytest.raises(KeyError):
        worldcal.register_calendar({"id": "mini"})
    worldcal.register_calendar({"id": "mini"}, overwrite=True)
    assert worldcal.get_engine("mini").get_year_length(3) == 365

    worldcal.register_calendar(eng, name="alias")
    assert worldcal.get_engine("alias") is eng


def test_module_level_conversions(fresh_registry):
    d = worldcal.world_time_to_date(86400, calendar="festival")
    assert (d.year, d.month, d.day) == (0, 1, 2)
    assert worldcal.date_to_world_time(d, calendar="festival") == 86400
    d = worldcal.world_time_to_date(0, world_creation_timestamp=0)
    assert (d.year, d.month, d.day) == (1970, 1, 1)
    assert [m.moon.name for m in worldcal.moon_phases(0, calendar="festival")] == ["Pale"]


def test_make_engine_from_file(calendar_file):
    eng = worldcal.make_engine(calendar_file)
    assert eng.calendar == FESTIVAL
    eng = worldcal.make_engine(str(calendar_file))
    assert eng.get_year_length(1492) == 366


def test_make_engine_rejects_bad_files(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(CalendarDefinitionError):
        worldcal.make_engine(bad)
    with pytest.raises(CalendarDefinitionError):
        worldcal.make_engine(tmp_path / "missing.json")
    with pytest.raises(CalendarDefinitionError):
        worldcal.make_engine(42)


# ------------------------------------------------------------
# CLI
# ------------------------------------------------------------

def test_cli_date(capsys):
    assert main(["date", "0"]) == 0
    out = capsys.readouterr().out
    assert "Saturday, 1st January 0 00:00:00" in out
    assert "season:  Winter" in out


def test_cli_date_json(capsys):
    assert main(["date", "-1", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert (data["year"], data["month"], data["day"]) == (-1, 12, 31)
    assert data["time"] == {"hour": 23, "minute": 59, "second": 59}


def test_cli_time(capsys):
    assert main(["time", "2024-01-01"]) == 0
    assert capsys.readouterr().out.strip() == str(739251 * 86400)
    assert main(["time", "0-01-01", "--time", "1:00:30"]) == 0
    assert capsys.readouterr().out.strip() == "3630"


def test_cli_intercalary_date(capsys):
    assert main(["time", "0-1-1", "--calendar", "festival", "--intercalary", "Midwinter"]) == 0
    assert capsys.readouterr().out.strip() == str(30 * 86400)


def test_cli_file(capsys, calendar_file):
    assert main(["date", str(30 * 86400), "--file", str(calendar_file)]) == 0
    assert "Midwinter (day 1), 0 DR" in capsys.readouterr().out


def test_cli_moons_and_list(capsys):
    assert main(["moons", "0", "--calendar", "festival"]) == 0
    assert "Pale" in capsys.readouterr().out
    assert main(["list"]) == 0
    assert capsys.readouterr().out.split() == ["festival", "gregorian"]


def test_cli_passes_integral_world_time_as_int(monkeypatch, capsys):
    seen = []
    eng = worldcal.get_engine("festival")
    monkeypatch.setattr(eng, "get_moon_phase_at_world_time", lambda wt, moon=None: seen.append(wt) or [])
    assert main(["moons", "86400", "--calendar", "festival"]) == 0
    assert main(["moons", "1.5", "--calendar", "festival"]) == 0
    assert seen == [86400, 1.5]
    assert type(seen[0]) is int
    assert "(no moons)" in capsys.readouterr().out


def test_cli_unknown_calendar():
    with pytest.raises(SystemExit):
        main(["date", "0", "--calendar", "nope"])


def test_cli_pretty_month(capsys):
    assert main(["pretty-month", "--calendar", "festival", "--year", "1492", "--month", "6"]) == 0
    out = capsys.readouterr().out
    assert "Highsun 1492 DR" in out
    assert "Shieldmeet" in out


def test_cli_round_trip(capsys):
    assert main(["diag", "round-trip", "--N", "50", "--span", "20000"]) == 0
    assert "failures=0" in capsys.readouterr().out


def test_year_drift_report(capsys):
    pytest.importorskip("numpy")
    from worldcal.diagnostics.year_drift import TROPICAL_YEAR_DAYS, drift_report

    r = drift_report(worldcal.get_engine("festival"), 1400, 2400)
    assert r["mean_length"] == pytest.approx(365.25, abs=1e-3)
    assert r["slope_days_per_year"] == pytest.approx(365.25 - TROPICAL_YEAR_DAYS, abs=1e-4)

    assert main(["diag", "year-drift", "--start", "1600", "--end", "2400"]) == 0
    assert "days/year" in capsys.readouterr().out
