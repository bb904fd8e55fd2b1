from __future__ import annotations
from worldcal.core.engine import CalendarRegistry
from worldcal.engines.specs import ALL_SPECS
from worldcal.engines.factory import make_engine

def build_registry() -> CalendarRegistry:
    engines = {}
    for name, definition in ALL_SPECS.items():
        engines[name] = make_engine(definition)
    return CalendarRegistry(engines)
