"""
worldcal.core.types
-------------------
Pure data carried through the engine: the calendar definition (as supplied by
the host, already schema-validated) and the immutable values the engine
produces.

Definitions arrive as JSON-shaped mappings with camelCase keys;
``CalendarDefinition.from_dict`` maps them onto frozen dataclasses. Optional
top-level sections that are absent stay ``None`` so the engine can tell
"missing" apart from "explicitly empty" when it merges defaults.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Literal, Mapping, Optional, Sequence, Tuple, Union

from .errors import CalendarDefinitionError

Number = Union[int, float]

LeapRuleName = Literal["none", "gregorian", "custom"]
Interpretation = Literal["epoch-based", "real-time-based"]
WeekType = Literal["month-based", "year-based"]
RemainderHandling = Literal["partial-last", "extend-last", "none"]
NamingPattern = Literal["ordinal", "numeric", "none"]


# ============================================================
# Calendar definition
# ============================================================

@dataclass(frozen=True)
class YearConfig:
    epoch: int = 0
    current_year: int = 2024
    start_day: int = 6  # weekday index of day 1 of month 1 of the epoch year
    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True)
class LeapYearRule:
    rule: LeapRuleName = "none"
    interval: Optional[int] = None
    offset: int = 0
    month: Optional[str] = None
    extra_days: int = 1


@dataclass(frozen=True)
class Month:
    name: str
    days: int
    abbreviation: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Weekday:
    name: str
    abbreviation: Optional[str] = None


@dataclass(frozen=True)
class Intercalary:
    name: str
    days: int = 1
    after: Optional[str] = None
    before: Optional[str] = None
    leap_year_only: bool = False
    counts_for_weekdays: bool = True
    description: Optional[str] = None

    @property
    def length(self) -> int:
        """Day count of the block; zero or negative counts read as one day."""
        return self.days if self.days and self.days > 0 else 1


@dataclass(frozen=True)
class TimeConfig:
    hours_in_day: int = 24
    minutes_in_hour: int = 60
    seconds_in_minute: int = 60


@dataclass(frozen=True)
class WorldTimeConfig:
    interpretation: Interpretation = "epoch-based"
    epoch_year: int = 0
    current_year: int = 0


@dataclass(frozen=True)
class WeekName:
    name: str
    abbreviation: Optional[str] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class WeeksConfig:
    type: WeekType = "month-based"
    days_per_week: Optional[int] = None
    per_month: Optional[int] = None
    remainder_handling: RemainderHandling = "partial-last"
    naming_pattern: NamingPattern = "numeric"
    names: Tuple[WeekName, ...] = ()


@dataclass(frozen=True)
class MoonReference:
    year: int
    month: int
    day: int


@dataclass(frozen=True)
class MoonPhase:
    name: str
    length: float
    single_day: bool = False
    icon: str = ""


@dataclass(frozen=True)
class Moon:
    name: str
    cycle_length: float
    first_new_moon: MoonReference
    phases: Tuple[MoonPhase, ...] = ()
    color: Optional[str] = None


@dataclass(frozen=True)
class Season:
    name: str
    start_month: int
    start_day: Optional[int] = None
    end_month: Optional[int] = None
    end_day: Optional[int] = None
    sunrise: Optional[str] = None  # "HH:MM"
    sunset: Optional[str] = None


@dataclass(frozen=True)
class CalendarDefinition:
    id: str = "custom"
    year: Optional[YearConfig] = None
    leap_year: Optional[LeapYearRule] = None
    months: Optional[Tuple[Month, ...]] = None
    weekdays: Optional[Tuple[Weekday, ...]] = None
    intercalary: Optional[Tuple[Intercalary, ...]] = None
    time: Optional[TimeConfig] = None
    world_time: Optional[WorldTimeConfig] = None
    weeks: Optional[WeeksConfig] = None
    moons: Tuple[Moon, ...] = ()
    seasons: Tuple[Season, ...] = ()

    def month_index(self, name: Optional[str]) -> int:
        """1-based index of the month called ``name``, or 0 when there is none."""
        if not name:
            return 0
        for i, m in enumerate(self.months or (), start=1):
            if m.name == name:
                return i
        return 0

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CalendarDefinition":
        if not isinstance(data, Mapping):
            raise CalendarDefinitionError(f"Calendar definition must be a mapping, got {type(data).__name__}")
        cal_id = str(data.get("id", "custom"))

        def section(key: str, parse):
            raw = data.get(key)
            if raw is None:
                return None
            try:
                return parse(raw)
            except (TypeError, ValueError, KeyError) as e:
                raise CalendarDefinitionError(f"Calendar {cal_id}: invalid '{key}' section: {e}") from e

        return CalendarDefinition(
            id=cal_id,
            year=section("year", _parse_year),
            leap_year=section("leapYear", _parse_leap_year),
            months=section("months", lambda v: tuple(_parse_month(m) for m in v)),
            weekdays=section("weekdays", lambda v: tuple(_parse_weekday(w) for w in v)),
            intercalary=section("intercalary", lambda v: tuple(_parse_intercalary(i) for i in v)),
            time=section("time", _parse_time),
            world_time=section("worldTime", _parse_world_time),
            weeks=section("weeks", _parse_weeks),
            moons=section("moons", lambda v: tuple(_parse_moon(m) for m in v)) or (),
            seasons=section("seasons", lambda v: tuple(_parse_season(s) for s in v)) or (),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of ``from_dict`` (camelCase keys, absent sections omitted)."""
        out: Dict[str, Any] = {"id": self.id}
        for key, value in (
            ("year", self.year),
            ("leapYear", self.leap_year),
            ("months", self.months),
            ("weekdays", self.weekdays),
            ("intercalary", self.intercalary),
            ("time", self.time),
            ("worldTime", self.world_time),
            ("weeks", self.weeks),
        ):
            if value is not None:
                out[key] = _camel(value)
        if self.moons:
            out["moons"] = _camel(self.moons)
        if self.seasons:
            out["seasons"] = _camel(self.seasons)
        return out


# ============================================================
# Values produced by the engine
# ============================================================

@dataclass(frozen=True)
class TimeOfDay:
    hour: int = 0
    minute: int = 0
    second: Number = 0  # fractional when the world time was


@dataclass(frozen=True)
class CalendarDate:
    """
    A structured date. ``weekday`` is ``None`` for intercalary days, and
    ``year`` is NaN for the invalid-input sentinel returned by
    ``CalendarEngine.world_time_to_date``.
    """
    year: Number
    month: int
    day: int
    weekday: Optional[int] = None
    intercalary: Optional[str] = None
    time: Optional[TimeOfDay] = None

    @property
    def is_intercalary(self) -> bool:
        return self.intercalary is not None

    @property
    def is_valid(self) -> bool:
        return not (isinstance(self.year, float) and not math.isfinite(self.year))

    def replace(self, **changes: Any) -> "CalendarDate":
        return replace(self, **changes)

    def compare_to(self, other: "CalendarDate") -> int:
        for a, b in ((self.year, other.year), (self.month, other.month), (self.day, other.day)):
            if a != b:
                return -1 if a < b else 1
        if self.time is not None and other.time is not None:
            t1 = (self.time.hour, self.time.minute, self.time.second)
            t2 = (other.time.hour, other.time.minute, other.time.second)
            if t1 != t2:
                return -1 if t1 < t2 else 1
        return 0

    def is_before(self, other: "CalendarDate") -> bool:
        return self.compare_to(other) < 0

    def is_after(self, other: "CalendarDate") -> bool:
        return self.compare_to(other) > 0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"year": self.year, "month": self.month, "day": self.day, "weekday": self.weekday}
        if self.intercalary is not None:
            out["intercalary"] = self.intercalary
        if self.time is not None:
            out["time"] = asdict(self.time)
        return out

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CalendarDate":
        t = data.get("time")
        return CalendarDate(
            year=data["year"],
            month=int(data["month"]),
            day=int(data["day"]),
            weekday=data.get("weekday"),
            intercalary=data.get("intercalary"),
            time=TimeOfDay(int(t.get("hour", 0)), int(t.get("minute", 0)), t.get("second", 0)) if t else None,
        )

    # ---------------------------------------------------------
    # Plain-text rendering (no template language)
    # ---------------------------------------------------------

    def year_string(self, calendar: CalendarDefinition) -> str:
        year = calendar.year or YearConfig()
        return f"{year.prefix}{_fmt_year(self.year)}{year.suffix}".strip()

    def to_time_string(self) -> str:
        if self.time is None:
            return ""
        return f"{self.time.hour:02d}:{self.time.minute:02d}:{int(self.time.second):02d}"

    def to_short_string(self, calendar: CalendarDefinition) -> str:
        if self.intercalary is not None:
            return f"{self.intercalary} {self.day}, {self.year_string(calendar)}"
        return f"{self.day} {_month_label(calendar, self.month, short=True)} {self.year_string(calendar)}"

    def to_date_string(self, calendar: CalendarDefinition) -> str:
        from .time import ordinal

        if self.intercalary is not None:
            return f"{self.intercalary} (day {self.day}), {self.year_string(calendar)}"
        weekday = "Unknown"
        weekdays = calendar.weekdays or ()
        if self.weekday is not None and 0 <= self.weekday < len(weekdays):
            weekday = weekdays[self.weekday].name
        return f"{weekday}, {ordinal(self.day)} {_month_label(calendar, self.month)} {self.year_string(calendar)}"

    def to_long_string(self, calendar: CalendarDefinition) -> str:
        text = self.to_date_string(calendar)
        if self.time is not None:
            text += f" {self.to_time_string()}"
        return text


@dataclass(frozen=True)
class MoonPhaseInfo:
    moon: Moon
    phase: MoonPhase
    phase_index: int
    day_in_phase: int
    day_in_phase_exact: float
    days_until_next: int
    days_until_next_exact: float
    phase_progress: float


@dataclass(frozen=True)
class SunTimes:
    """Sunrise and sunset as decimal hours (6.5 == 06:30 on a 60-minute hour)."""
    sunrise: float
    sunset: float


# ============================================================
# Parsing helpers
# ============================================================

def _opt_int(v: Any) -> Optional[int]:
    return None if v is None else int(v)


def _parse_year(d: Mapping[str, Any]) -> YearConfig:
    base = YearConfig()
    return YearConfig(
        epoch=int(d.get("epoch", base.epoch)),
        current_year=int(d.get("currentYear", base.current_year)),
        start_day=int(d.get("startDay", base.start_day)),
        prefix=str(d.get("prefix", "")),
        suffix=str(d.get("suffix", "")),
    )


def _parse_leap_year(d: Mapping[str, Any]) -> LeapYearRule:
    rule = d.get("rule", "none")
    if rule not in ("none", "gregorian", "custom"):
        raise ValueError(f"unknown leap year rule {rule!r}")
    extra = d.get("extraDays")
    return LeapYearRule(
        rule=rule,
        interval=_opt_int(d.get("interval")),
        offset=int(d.get("offset", 0) or 0),
        month=d.get("month"),
        extra_days=1 if extra is None else int(extra),
    )


def _parse_month(d: Mapping[str, Any]) -> Month:
    return Month(name=str(d["name"]), days=int(d["days"]),
                 abbreviation=d.get("abbreviation"), description=d.get("description"))


def _parse_weekday(d: Mapping[str, Any]) -> Weekday:
    return Weekday(name=str(d["name"]), abbreviation=d.get("abbreviation"))


def _parse_intercalary(d: Mapping[str, Any]) -> Intercalary:
    counts = d.get("countsForWeekdays")
    return Intercalary(
        name=str(d["name"]),
        days=int(d.get("days") or 1),
        after=d.get("after"),
        before=d.get("before"),
        leap_year_only=bool(d.get("leapYearOnly", False)),
        counts_for_weekdays=True if counts is None else bool(counts),
        description=d.get("description"),
    )


def _parse_time(d: Mapping[str, Any]) -> TimeConfig:
    base = TimeConfig()
    return TimeConfig(
        hours_in_day=int(d.get("hoursInDay", base.hours_in_day)),
        minutes_in_hour=int(d.get("minutesInHour", base.minutes_in_hour)),
        seconds_in_minute=int(d.get("secondsInMinute", base.seconds_in_minute)),
    )


def _parse_world_time(d: Mapping[str, Any]) -> WorldTimeConfig:
    return WorldTimeConfig(
        interpretation=d.get("interpretation", "epoch-based"),
        epoch_year=int(d.get("epochYear", 0)),
        current_year=int(d.get("currentYear", 0)),
    )


def _parse_weeks(d: Mapping[str, Any]) -> WeeksConfig:
    return WeeksConfig(
        type=d.get("type", "month-based"),
        days_per_week=_opt_int(d.get("daysPerWeek")),
        per_month=_opt_int(d.get("perMonth")),
        remainder_handling=d.get("remainderHandling", "partial-last"),
        naming_pattern=d.get("namingPattern", "numeric"),
        names=tuple(
            WeekName(
                name=str(n["name"]),
                abbreviation=n.get("abbreviation"),
                prefix=n.get("prefix"),
                suffix=n.get("suffix"),
                description=n.get("description"),
            )
            for n in d.get("names") or ()
        ),
    )


def _parse_moon(d: Mapping[str, Any]) -> Moon:
    ref = d["firstNewMoon"]
    return Moon(
        name=str(d["name"]),
        cycle_length=float(d["cycleLength"]),
        first_new_moon=MoonReference(int(ref["year"]), int(ref["month"]), int(ref["day"])),
        phases=tuple(
            MoonPhase(
                name=str(p["name"]),
                length=float(p["length"]),
                single_day=bool(p.get("singleDay", False)),
                icon=str(p.get("icon", "")),
            )
            for p in d.get("phases") or ()
        ),
        color=d.get("color"),
    )


def _parse_season(d: Mapping[str, Any]) -> Season:
    return Season(
        name=str(d["name"]),
        start_month=int(d["startMonth"]),
        start_day=_opt_int(d.get("startDay")),
        end_month=_opt_int(d.get("endMonth")),
        end_day=_opt_int(d.get("endDay")),
        sunrise=d.get("sunrise"),
        sunset=d.get("sunset"),
    )


def _camel(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_camel(v) for v in value]
    return _camel_plain(asdict(value))


def _camel_plain(value: Any) -> Any:
    # asdict() has already flattened nested dataclasses into dicts
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if v is None:
                continue
            head, *rest = k.split("_")
            out[head + "".join(p.title() for p in rest)] = _camel_plain(v)
        return out
    if isinstance(value, (list, tuple)):
        return [_camel_plain(v) for v in value]
    return value


def _month_label(calendar: CalendarDefinition, month: int, *, short: bool = False) -> str:
    months: Sequence[Month] = calendar.months or ()
    if not 1 <= month <= len(months):
        return "Unknown"
    m = months[month - 1]
    if short and m.abbreviation:
        return m.abbreviation
    return m.name


def _fmt_year(year: Number) -> str:
    if isinstance(year, float) and year.is_integer():
        return str(int(year))
    return str(year)
