#!/usr/bin/env python3
"""
Leap-rule drift report.

Year lengths over a span of years are compared with a reference solar year:
the mean year length, the accumulated offset of each year start, and the
linear trend of that offset (days per year, least squares).
"""
from __future__ import annotations

import argparse

from worldcal.cli import add_calendar_args, engine_from_args
from worldcal.engines.calendar import CalendarEngine

TROPICAL_YEAR_DAYS = 365.24219


def _need_numpy():
    try:
        import numpy as np
        return np
    except ImportError as e:
        raise RuntimeError('Need numpy. Install: pip install "worldcal[diagnostics]"') from e


def _need_matplotlib():
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "worldcal[diagnostics]"') from e


def drift_report(eng: CalendarEngine, start: int, end: int, reference: float = TROPICAL_YEAR_DAYS):
    np = _need_numpy()

    years = np.arange(start, end + 1)
    lengths = np.array([eng.get_year_length(int(y)) for y in years], dtype=float)
    # offset of each year start relative to the reference, 0 at ``start``
    starts = np.concatenate(([0.0], np.cumsum(lengths)[:-1]))
    offset = starts - reference * (years - start)
    slope, intercept = np.polyfit(years - start, offset, 1)

    return {
        "years": years,
        "lengths": lengths,
        "offset": offset,
        "mean_length": float(lengths.mean()),
        "slope_days_per_year": float(slope),
        "intercept": float(intercept),
        "max_abs_offset": float(np.abs(offset).max()),
    }


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Mean year length and drift against a reference solar year.")
    add_calendar_args(p)
    p.add_argument("--start", type=int, default=None, help="First year (default: current year - 200)")
    p.add_argument("--end", type=int, default=None, help="Last year (default: current year + 200)")
    p.add_argument("--reference", type=float, default=TROPICAL_YEAR_DAYS,
                   help=f"Reference year length in days (default {TROPICAL_YEAR_DAYS})")
    p.add_argument("--plot", action="store_true", help="Plot the offset (needs matplotlib)")
    args = p.parse_args(argv)

    eng = engine_from_args(args)
    current = eng.calendar.year.current_year
    start = args.start if args.start is not None else current - 200
    end = args.end if args.end is not None else current + 200
    if end <= start:
        print("Need --end > --start")
        return 1

    r = drift_report(eng, start, end, args.reference)
    print(f"calendar            : {eng.calendar.id}")
    print(f"years               : {start} .. {end}")
    print(f"mean year length    : {r['mean_length']:.6f} days")
    print(f"reference           : {args.reference:.6f} days")
    print(f"drift (linear fit)  : {r['slope_days_per_year']:+.6f} days/year")
    print(f"drift per millennium: {1000 * r['slope_days_per_year']:+.3f} days")
    print(f"max |offset|        : {r['max_abs_offset']:.3f} days")

    if args.plot:
        plt = _need_matplotlib()
        plt.figure(figsize=(10, 4))
        plt.plot(r["years"], r["offset"], lw=1)
        plt.axhline(0.0, color="grey", lw=0.5)
        plt.xlabel("year")
        plt.ylabel("year start - reference (days)")
        plt.title(f"{eng.calendar.id}: drift against {args.reference:g}-day year")
        plt.tight_layout()
        plt.show()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
