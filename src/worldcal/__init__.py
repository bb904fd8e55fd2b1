"""worldcal public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

# Initialize registry on import
from . import api_init as _api_init  # noqa: F401

from .api import (
    list_calendars,
    get_engine,
    calendar_info,
    make_engine,
    register_calendar,
    world_time_to_date,
    date_to_world_time,
    moon_phases,
)
from .core.diagnostics import WarningState
from .core.errors import CalendarDefinitionError, UnknownCalendarError, WorldcalError
from .core.types import CalendarDate, CalendarDefinition, TimeOfDay
from .engines.calendar import CalendarEngine
from .engines.compat import WeekdayOffset

__all__ = [
    "list_calendars",
    "get_engine",
    "calendar_info",
    "make_engine",
    "register_calendar",
    "world_time_to_date",
    "date_to_world_time",
    "moon_phases",
    "WarningState",
    "CalendarDefinitionError",
    "UnknownCalendarError",
    "WorldcalError",
    "CalendarDate",
    "CalendarDefinition",
    "TimeOfDay",
    "CalendarEngine",
    "WeekdayOffset",
]
