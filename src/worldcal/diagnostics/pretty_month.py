from __future__ import annotations

import argparse

from worldcal.cli import add_calendar_args, engine_from_args
from worldcal.core.types import CalendarDate
from worldcal.engines.calendar import CalendarEngine


def cell(text: str, w: int = 4) -> str:
    return text[:w].rjust(w)


def dow_header(eng: CalendarEngine, w: int = 4) -> str:
    return " ".join(cell(wd.abbreviation or wd.name, w) for wd in eng.calendar.weekdays)


def month_rows(eng: CalendarEngine, year: int, month: int) -> list[list[str]]:
    n_cols = len(eng.calendar.weekdays)
    length = eng.get_month_length(month, year)
    first = eng.calculate_weekday(year, month, 1)

    rows: list[list[str]] = []
    row = [cell("")] * first
    for day in range(1, length + 1):
        row.append(cell(str(day)))
        if len(row) == n_cols:
            rows.append(row)
            row = []
    if row:
        rows.append(row + [cell("")] * (n_cols - len(row)))
    return rows


def print_month(eng: CalendarEngine, year: int, month: int) -> None:
    cal = eng.calendar
    name = cal.months[month - 1].name
    title = CalendarDate(year, month, 1).year_string(cal)
    header = dow_header(eng)

    for ic in eng.get_intercalary_days_before_month(year, month):
        print(f"  [{ic.name}: {ic.length} day(s) before {name}]")
    print(f"{name} {title}")
    print(header)
    print("-" * len(header))
    for row in month_rows(eng, year, month):
        print(" ".join(row))
    for ic in eng.get_intercalary_days_after_month(year, month):
        print(f"  [{ic.name}: {ic.length} day(s) after {name}]")
    print()


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print a month grid with weekday columns and intercalary blocks.")
    add_calendar_args(p)
    p.add_argument("--year", type=int, default=None, help="Year (default: the calendar's current year)")
    p.add_argument("--month", type=int, default=None, help="1-based month; omit to print the whole year")
    args = p.parse_args(argv)

    eng = engine_from_args(args)
    year = args.year if args.year is not None else eng.calendar.year.current_year
    months = [args.month] if args.month else range(1, len(eng.calendar.months) + 1)
    for m in months:
        if not 1 <= m <= len(eng.calendar.months):
            print(f"Month {m} out of range 1..{len(eng.calendar.months)}")
            return 1
        print_month(eng, year, m)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
