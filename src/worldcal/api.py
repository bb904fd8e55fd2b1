from __future__ import annotations

from typing import Any, Dict, List, Optional

from .core.engine import CalendarRegistry
from .core.types import CalendarDate, MoonPhaseInfo, Number
from .engines.calendar import CalendarEngine
from .engines.factory import CalendarSource, make_engine as _make_engine

DEFAULT_CALENDAR = "gregorian"
_registry: Optional[CalendarRegistry] = None

def set_registry(reg: CalendarRegistry) -> None:
    global _registry
    _registry = reg

def _reg() -> CalendarRegistry:
    if _registry is None:
        raise RuntimeError("Calendar registry not initialized")
    return _registry

def list_calendars() -> List[str]:
    return _reg().list()

def get_engine(name: str = DEFAULT_CALENDAR) -> CalendarEngine:
    return _reg().get(name)

def calendar_info(name: str = DEFAULT_CALENDAR) -> Dict[str, Any]:
    return _reg().get(name).info()

def make_engine(source: CalendarSource, **options: Any) -> CalendarEngine:
    return _make_engine(source, **options)

def register_calendar(source: CalendarSource, *, name: Optional[str] = None, overwrite: bool = False,
                      **options: Any) -> CalendarEngine:
    """Build an engine (unless one is given) and register it under ``name`` or its calendar id."""
    eng = source if isinstance(source, CalendarEngine) else _make_engine(source, **options)
    _reg().register(name or eng.calendar.id, eng, overwrite=overwrite)
    return eng

def world_time_to_date(
    world_time: Number,
    *,
    calendar: str = DEFAULT_CALENDAR,
    world_creation_timestamp: Optional[Number] = None,
) -> CalendarDate:
    return _reg().get(calendar).world_time_to_date(world_time, world_creation_timestamp)

def date_to_world_time(
    date: CalendarDate,
    *,
    calendar: str = DEFAULT_CALENDAR,
    world_creation_timestamp: Optional[Number] = None,
) -> Number:
    return _reg().get(calendar).date_to_world_time(date, world_creation_timestamp)

def moon_phases(
    world_time: Number,
    *,
    calendar: str = DEFAULT_CALENDAR,
    moon: Optional[str] = None,
) -> List[MoonPhaseInfo]:
    return _reg().get(calendar).get_moon_phase_at_world_time(world_time, moon)
