"""
worldcal.engines.moons
----------------------
Moon phase position from whole days elapsed since a moon's reference new moon.

Cycle and phase lengths are real numbers, so every derived quantity is
rounded to 6 decimal places before it is compared or reported; otherwise
binary floating-point noise makes the phase flicker at exact boundaries.
"""

from __future__ import annotations

import math
from typing import Optional

from ..core.engine import DayCountingEngine
from ..core.types import CalendarDate, Moon, MoonPhaseInfo

PHASE_BOUNDARY_TOLERANCE = 1e-6
_PRECISION = 1_000_000


def normalize_fraction(value: float) -> float:
    rounded = round(value * _PRECISION) / _PRECISION
    if rounded == 0 or not math.isfinite(rounded):
        return 0.0
    return rounded


def cycle_position(elapsed_days: float, cycle_length: float) -> float:
    """Position within the cycle, in [0, cycle_length)."""
    if elapsed_days < 0:
        elapsed_days += math.ceil(-elapsed_days / cycle_length) * cycle_length
    pos = normalize_fraction(elapsed_days % cycle_length)
    if pos >= cycle_length:
        pos = 0.0
    return pos


def phase_at(moon: Moon, elapsed_days: float) -> Optional[MoonPhaseInfo]:
    """
    Phase of ``moon`` ``elapsed_days`` after its reference new moon.
    Returns None for moons without phases or with a non-positive cycle.
    """
    if not moon.phases or not moon.cycle_length > 0:
        return None

    pos = cycle_position(elapsed_days, moon.cycle_length)

    phase_start = 0.0
    index = len(moon.phases) - 1
    for i, phase in enumerate(moon.phases):
        phase_end = normalize_fraction(phase_start + phase.length)
        if pos < phase_end - PHASE_BOUNDARY_TOLERANCE:
            index = i
            break
        if i < len(moon.phases) - 1:
            phase_start = phase_end

    phase = moon.phases[index]
    length = phase.length
    day_in_phase = min(max(normalize_fraction(pos - phase_start), 0.0), length)
    until_next = max(normalize_fraction(length - day_in_phase), 0.0)
    progress = min(max(day_in_phase / length, 0.0), 1.0) if length > 0 else 0.0

    return MoonPhaseInfo(
        moon=moon,
        phase=phase,
        phase_index=index,
        day_in_phase=math.floor(day_in_phase),
        day_in_phase_exact=day_in_phase,
        days_until_next=max(math.ceil(until_next), 0),
        days_until_next_exact=until_next,
        phase_progress=progress,
    )


def phase_for_date(engine: DayCountingEngine, moon: Moon, date: CalendarDate) -> Optional[MoonPhaseInfo]:
    ref = moon.first_new_moon
    reference = CalendarDate(ref.year, ref.month, ref.day)
    elapsed = engine.date_to_days(date) - engine.date_to_days(reference)
    if isinstance(elapsed, float) and not math.isfinite(elapsed):
        return None
    return phase_at(moon, elapsed)
