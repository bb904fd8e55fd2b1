from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Protocol

from .errors import UnknownCalendarError
from .types import CalendarDate, CalendarDefinition, Number

if TYPE_CHECKING:
    from ..engines.calendar import CalendarEngine


class DayCountingEngine(Protocol):
    """What the week, moon and sunrise helpers need from an engine."""
    calendar: CalendarDefinition

    def date_to_days(self, date: CalendarDate) -> Number: ...
    def is_leap_year(self, year: Number) -> bool: ...
    def get_month_lengths(self, year: Number) -> List[int]: ...
    def get_month_length(self, month: int, year: Number) -> int: ...
    def get_year_length(self, year: Number) -> int: ...
    def get_day_of_year(self, date: CalendarDate) -> int: ...


@dataclass
class CalendarRegistry:
    """Live calendar engines keyed by the name they were registered under."""
    _engines: Dict[str, CalendarEngine] = field(default_factory=dict)

    def get(self, name: str) -> CalendarEngine:
        if name not in self._engines:
            raise UnknownCalendarError(f"Unknown calendar '{name}'. Available: {sorted(self._engines)}")
        return self._engines[name]

    def list(self) -> List[str]:
        return sorted(self._engines)

    def register(self, name: str, engine: CalendarEngine, *, overwrite: bool = False) -> None:
        if (not overwrite) and (name in self._engines):
            raise KeyError(f"Calendar '{name}' is already registered. Use overwrite=True to replace it.")
        self._engines[name] = engine
