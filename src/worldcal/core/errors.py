class WorldcalError(Exception):
    """Base error."""

class CalendarDefinitionError(WorldcalError, ValueError):
    """Raised when a calendar definition cannot be parsed into dataclasses."""

class UnknownCalendarError(WorldcalError, KeyError):
    """Raised when a registry lookup names a calendar that was never registered."""
