"""
worldcal.engines.compat
-----------------------
Weekday compatibility hooks. Host integrations (game systems that number
weekdays differently) shift the weekday the engine reports without touching
day counting. The engine calls the hook once per weekday calculation.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol

from ..core.types import CalendarDefinition


class WeekdayAdjustment(Protocol):
    def __call__(self, weekday: int, calendar: CalendarDefinition) -> int: ...


def identity_adjustment(weekday: int, calendar: CalendarDefinition) -> int:
    return weekday


@dataclass(frozen=True)
class WeekdayOffset:
    """Shift every weekday by ``offset`` slots, wrapping around the week."""
    offset: int

    def __call__(self, weekday: int, calendar: CalendarDefinition) -> int:
        if not self.offset:
            return weekday
        count = len(calendar.weekdays or ()) or 7
        return (weekday + self.offset) % count
