"""
worldcal.engines.factory
------------------------
Turns calendar data (definition objects, JSON-shaped mappings, JSON files)
into live engines.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Union

from ..core.errors import CalendarDefinitionError
from ..core.types import CalendarDefinition
from .calendar import CalendarEngine

CalendarSource = Union[CalendarDefinition, Mapping[str, Any], str, "os.PathLike[str]"]


def load_definition(path: Union[str, "os.PathLike[str]"]) -> CalendarDefinition:
    """Read a JSON calendar definition from a local file."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise CalendarDefinitionError(f"Cannot read calendar file {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise CalendarDefinitionError(f"Calendar file {p} is not valid JSON: {e}") from e
    return CalendarDefinition.from_dict(data)


def as_definition(source: CalendarSource) -> CalendarDefinition:
    if isinstance(source, CalendarDefinition):
        return source
    if isinstance(source, Mapping):
        return CalendarDefinition.from_dict(source)
    if isinstance(source, (str, os.PathLike)):
        return load_definition(source)
    raise CalendarDefinitionError(f"Cannot build a calendar from {type(source).__name__}")


def make_engine(source: CalendarSource, **options: Any) -> CalendarEngine:
    """The universal entry point. ``options`` go to ``CalendarEngine``."""
    return CalendarEngine(as_definition(source), **options)
