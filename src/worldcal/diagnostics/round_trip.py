from __future__ import annotations

import argparse
import math
import random

from worldcal.cli import add_calendar_args, engine_from_args
from worldcal.engines.calendar import CalendarEngine
from worldcal.core.time import seconds_per_day


def day_round_trip(eng: CalendarEngine, N: int, lo: int, hi: int, *, max_failures: int) -> int:
    """days -> date -> days must be the identity."""
    failures = 0
    for _ in range(N):
        n = random.randint(lo, hi)
        d = eng.days_to_date(n)
        back = eng.date_to_days(d)
        if back != n:
            failures += 1
            print("\nFAIL (days)")
            print("n:", n)
            print("date:", d)
            print("back:", back)
            if failures >= max_failures:
                return failures
    return failures


def world_time_round_trip(eng: CalendarEngine, N: int, lo: int, hi: int, *,
                          timestamp: float | None, max_failures: int) -> int:
    """world time -> date -> world time must be the identity (whole seconds)."""
    failures = 0
    spd = seconds_per_day(eng.calendar.time)
    for _ in range(N):
        wt = random.randint(lo * spd, hi * spd)
        d = eng.world_time_to_date(wt, timestamp)
        back = eng.date_to_world_time(d, timestamp)
        if not math.isclose(back, wt, abs_tol=1e-6):
            failures += 1
            print("\nFAIL (world time)")
            print("world_time:", wt, "timestamp:", timestamp)
            print("date:", d)
            print("back:", back)
            if failures >= max_failures:
                return failures
    return failures


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Random round-trip tests: day count / world time -> date -> back.")
    add_calendar_args(p)
    p.add_argument("--N", type=int, default=2000, help="Trials per check.")
    p.add_argument("--span", type=int, default=200_000, help="Sample day counts in [-span, span].")
    p.add_argument("--timestamp", type=float, default=1_700_000_000.0,
                   help="World creation timestamp for the anchored check.")
    p.add_argument("--seed", type=int, default=123, help="RNG seed.")
    p.add_argument("--max-failures", type=int, default=5, help="Stop after this many failures per check.")
    args = p.parse_args(argv)

    eng = engine_from_args(args)
    random.seed(args.seed)

    total = 0
    for label, run in (
        ("days", lambda: day_round_trip(eng, args.N, -args.span, args.span, max_failures=args.max_failures)),
        ("world time", lambda: world_time_round_trip(eng, args.N, -args.span, args.span,
                                                     timestamp=None, max_failures=args.max_failures)),
        ("anchored world time", lambda: world_time_round_trip(eng, args.N, -args.span, args.span,
                                                              timestamp=args.timestamp,
                                                              max_failures=args.max_failures)),
    ):
        f = run()
        total += f
        print(f"{eng.calendar.id:<12} {label:<20} failures={f}")

    return 1 if total else 0


if __name__ == "__main__":
    raise SystemExit(main())
