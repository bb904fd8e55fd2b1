from .calendar import CalendarEngine
from .compat import WeekdayOffset, identity_adjustment
from .factory import make_engine

__all__ = ["CalendarEngine", "WeekdayOffset", "identity_adjustment", "make_engine"]
