from __future__ import annotations

import argparse
import importlib
import inspect
import json
import logging
import re
import sys

from .core.errors import WorldcalError
from .core.types import CalendarDate, TimeOfDay
from .core.time import hours_to_time_string


_DATE_RE = re.compile(r"^(-?\d+)-(\d+)-(\d+)$")


def _parse_ymd(s: str) -> tuple[int, int, int]:
    m = _DATE_RE.match(s.strip())
    if not m:
        raise argparse.ArgumentTypeError(f"expected YEAR-MONTH-DAY, got {s!r}")
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def _world_time(value: float):
    return int(value) if value.is_integer() else value


def _parse_hms(s: str) -> TimeOfDay:
    parts = s.split(":")
    if not 1 <= len(parts) <= 3:
        raise argparse.ArgumentTypeError(f"expected H[:M[:S]], got {s!r}")
    parts += ["0"] * (3 - len(parts))
    try:
        h, m, sec = int(parts[0]), int(parts[1]), float(parts[2])
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected H[:M[:S]], got {s!r}") from e
    return TimeOfDay(h, m, int(sec) if sec.is_integer() else sec)


def add_calendar_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--calendar", default="gregorian", help="registered calendar name (default: gregorian)")
    p.add_argument("--file", default=None, help="load the calendar from a local JSON definition instead")


def engine_from_args(args: argparse.Namespace):
    import worldcal

    if args.file:
        return worldcal.make_engine(args.file)
    return worldcal.get_engine(args.calendar)


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _print_date(eng, d: CalendarDate, as_json: bool) -> None:
    if as_json:
        print(json.dumps(d.to_dict()))
        return
    print(d.to_long_string(eng.calendar))
    if d.is_valid and not d.is_intercalary:
        week = eng.get_week_info(d)
        if week is not None:
            print(f"  week:    {week.name}")
    season = eng.get_season(d) if d.is_valid else None
    if season is not None:
        sun = eng.get_sunrise_sunset(d)
        minutes = eng.calendar.time.minutes_in_hour
        print(f"  season:  {season.name}")
        print(f"  sunrise: {hours_to_time_string(sun.sunrise, minutes)}  sunset: {hours_to_time_string(sun.sunset, minutes)}")


def cmd_date(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="worldcal date", description="World time (seconds) -> calendar date")
    p.add_argument("world_time", type=float, help="seconds of world time")
    p.add_argument("--timestamp", type=float, default=None, help="world creation Unix timestamp (seconds)")
    p.add_argument("--json", action="store_true", help="print the date as JSON")
    add_calendar_args(p)
    args = p.parse_args(argv)

    eng = engine_from_args(args)
    _print_date(eng, eng.world_time_to_date(_world_time(args.world_time), args.timestamp), args.json)
    return 0


def cmd_time(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="worldcal time", description="Calendar date -> world time (seconds)")
    p.add_argument("date", type=_parse_ymd, help="YEAR-MONTH-DAY (year may be negative)")
    p.add_argument("--time", type=_parse_hms, default=None, help="H:M:S")
    p.add_argument("--intercalary", default=None, help="name of the intercalary block the day belongs to")
    p.add_argument("--timestamp", type=float, default=None, help="world creation Unix timestamp (seconds)")
    add_calendar_args(p)
    args = p.parse_args(argv)

    eng = engine_from_args(args)
    y, m, d = args.date
    date = CalendarDate(y, m, d, intercalary=args.intercalary, time=args.time)
    print(eng.date_to_world_time(date, args.timestamp))
    return 0


def cmd_moons(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="worldcal moons", description="Moon phases at a world time")
    p.add_argument("world_time", type=float)
    p.add_argument("--moon", default=None, help="only this moon")
    add_calendar_args(p)
    args = p.parse_args(argv)

    eng = engine_from_args(args)
    phases = eng.get_moon_phase_at_world_time(_world_time(args.world_time), args.moon)
    if not phases:
        print("(no moons)")
    for info in phases:
        print(f"{info.moon.name:<12} {info.phase.name:<16} "
              f"day {info.day_in_phase + 1}, {info.days_until_next} until next ({info.phase_progress:.0%})")
    return 0


def cmd_list(argv: list[str]) -> int:
    import worldcal

    p = argparse.ArgumentParser(prog="worldcal list", description="List registered calendars")
    p.add_argument("--verbose-info", action="store_true", help="print engine info for each calendar")
    args = p.parse_args(argv)

    for name in worldcal.list_calendars():
        if args.verbose_info:
            print(name, worldcal.calendar_info(name))
        else:
            print(name)
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="worldcal", description="Fantasy/world calendar toolkit CLI.", allow_abbrev=False)
    p.add_argument("-v", "--verbose", action="count", default=0, help="log warnings (-v) or debug detail (-vv)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("date", help="World time (seconds) -> calendar date", add_help=False)
    sub.add_parser("time", help="Calendar date -> world time (seconds)", add_help=False)
    sub.add_parser("moons", help="Moon phases at a world time", add_help=False)
    sub.add_parser("list", help="List registered calendars", add_help=False)
    sub.add_parser("pretty-month", help="Print a month grid (diagnostics)", add_help=False)

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument("tool", choices=["round-trip", "year-drift"], help="Which diagnostic to run")

    args, rest = p.parse_known_args(argv)

    level = {0: logging.ERROR, 1: logging.WARNING}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    commands = {"date": cmd_date, "time": cmd_time, "moons": cmd_moons, "list": cmd_list}
    try:
        if args.cmd in commands:
            return commands[args.cmd](rest)

        if args.cmd == "pretty-month":
            return _run_module_main("worldcal.diagnostics.pretty_month", rest)

        if args.cmd == "diag":
            tool_map = {
                "round-trip": "worldcal.diagnostics.round_trip",
                "year-drift": "worldcal.diagnostics.year_drift",
            }
            return _run_module_main(tool_map[args.tool], rest)
    except WorldcalError as e:
        raise SystemExit(f"worldcal: {e}") from e

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
