"""
worldcal.engines.calendar
-------------------------
The calendar engine. Maps a scalar world time (seconds) to structured dates
and back under a data-driven calendar definition.

Every year is laid out as an ordered run of segments: for each month, the
intercalary blocks placed before it, the month itself, then the blocks placed
after it. Forward (days -> date) and inverse (date -> days) conversion walk
the same layout, which is what makes them exact inverses of each other.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from ..core.defaults import apply_gregorian_defaults
from ..core.diagnostics import WarningState
from ..core.time import (
    UtcMoment,
    normalize_month,
    seconds_per_day,
    seconds_per_hour,
    utc_moment,
)
from ..core.types import (
    CalendarDate,
    CalendarDefinition,
    Intercalary,
    Moon,
    MoonPhaseInfo,
    Number,
    Season,
    SunTimes,
    TimeOfDay,
    WeekName,
)
from .compat import WeekdayAdjustment, identity_adjustment
from .moons import phase_for_date
from .sunrise import find_season_index, sunrise_sunset
from .weeks import week_info, week_of_month

logger = logging.getLogger(__name__)

DEFAULT_CACHE_WINDOW = 10


class Segment(NamedTuple):
    month: int  # 1-based month the segment belongs to (or is anchored on)
    length: int
    intercalary: Optional[Intercalary] = None


@dataclass(frozen=True)
class YearData:
    """Layout shared by every leap (or every common) year."""
    is_leap: bool
    month_lengths: Tuple[int, ...]
    intercalary: Tuple[Intercalary, ...]
    segments: Tuple[Segment, ...]
    length: int
    weekday_length: int  # days that advance the weekday cycle


def _finite(x: Any) -> bool:
    return not (isinstance(x, float) and not math.isfinite(x))


def _carry(fraction: float, unit: int) -> Number:
    """Scale a fractional remainder into the next finer unit; 9 decimals absorb float noise."""
    value = round(fraction * unit, 9)
    return int(value) if value.is_integer() else value


class CalendarEngine:
    """
    Owns one calendar definition and performs all date arithmetic on it.

    Missing core sections are filled from the Gregorian reference at
    construction. Operations never raise on structurally valid input:
    broken cross-references (an intercalary block naming a month that does
    not exist) are treated as "no match" and logged once.
    """

    def __init__(
        self,
        calendar: CalendarDefinition,
        *,
        weekday_adjustment: WeekdayAdjustment = identity_adjustment,
        warnings: Optional[WarningState] = None,
        cache_window: int = DEFAULT_CACHE_WINDOW,
    ):
        self.warnings = warnings if warnings is not None else WarningState()
        self.weekday_adjustment = weekday_adjustment
        self.cache_window = cache_window
        self._layouts: Dict[bool, YearData] = {}
        self._year_cache: Dict[int, YearData] = {}
        self._install(calendar)

    def _install(self, calendar: CalendarDefinition) -> None:
        self.calendar = apply_gregorian_defaults(calendar, self.warnings)
        self._check_references()
        self._layouts = {False: self._build_layout(False), True: self._build_layout(True)}
        self._mean_year_length = self._compute_mean_year_length()
        self._year_cache.clear()
        self._precompute_year_data()
        self._real_time_offset = self._compute_real_time_offset()

    def update_calendar(self, calendar: CalendarDefinition) -> None:
        """Replace the definition wholesale; dates derived earlier are plain data from here on."""
        self._install(calendar)

    def get_calendar(self) -> CalendarDefinition:
        return replace(self.calendar)

    def info(self) -> Dict[str, Any]:
        cal = self.calendar
        return {
            "id": cal.id,
            "epoch": cal.year.epoch,
            "current_year": cal.year.current_year,
            "months": len(cal.months),
            "weekdays": len(cal.weekdays),
            "intercalary": len(cal.intercalary),
            "leap_rule": cal.leap_year.rule,
            "moons": [m.name for m in cal.moons],
            "seconds_per_day": seconds_per_day(cal.time),
        }

    # ---------------------------------------------------------
    # Construction-time checks and the per-year cache
    # ---------------------------------------------------------

    def _warn_once(self, key: str, msg: str, *args: Any) -> None:
        if self.warnings.should_warn(f"{self.calendar.id}:{key}"):
            logger.warning(msg, *args)

    def _check_references(self) -> None:
        cal = self.calendar
        for m in cal.months:
            if m.days < 1:
                self._warn_once(f"month-days:{m.name}",
                                "Calendar %s: month %r has %d days; counting it as 1", cal.id, m.name, m.days)
        for ic in cal.intercalary:
            if ic.after and ic.before:
                self._warn_once(f"anchor-both:{ic.name}",
                                "Calendar %s: intercalary %r names both after and before; using after",
                                cal.id, ic.name)
            if self._anchor(ic) is None:
                self._warn_once(f"anchor:{ic.name}",
                                "Calendar %s: intercalary %r references no existing month; ignoring it",
                                cal.id, ic.name)
        leap = cal.leap_year
        if leap.rule != "none" and leap.month and not cal.month_index(leap.month):
            self._warn_once("leap-month",
                            "Calendar %s: leap year month %r not found; leap years keep their length",
                            cal.id, leap.month)

    def _anchor(self, ic: Intercalary) -> Optional[Tuple[str, int]]:
        if ic.after:
            idx = self.calendar.month_index(ic.after)
            if idx:
                return "after", idx
        if ic.before:
            idx = self.calendar.month_index(ic.before)
            if idx:
                return "before", idx
        return None

    def _precompute_year_data(self) -> None:
        current = self.calendar.year.current_year
        for year in range(current - self.cache_window, current + self.cache_window + 1):
            self._year_cache[year] = self._layouts[self.is_leap_year(year)]

    def _year(self, year: Number) -> YearData:
        data = self._year_cache.get(year)
        if data is None:
            data = self._layouts[self.is_leap_year(year)]
        return data

    def _leap_density(self) -> float:
        leap = self.calendar.leap_year
        if leap.rule == "gregorian":
            return 97 / 400
        if leap.rule == "custom" and leap.interval:
            return 1 / abs(leap.interval)
        return 0.0

    def _compute_mean_year_length(self) -> float:
        p = self._leap_density()
        return self._layouts[True].length * p + self._layouts[False].length * (1 - p)

    def _build_layout(self, is_leap: bool) -> YearData:
        lengths = self._month_lengths(is_leap)

        applicable: List[Intercalary] = []
        before: Dict[int, List[Intercalary]] = {}
        after: Dict[int, List[Intercalary]] = {}
        for ic in self.calendar.intercalary:
            if ic.leap_year_only and not is_leap:
                continue
            anchor = self._anchor(ic)
            if anchor is None:
                continue
            applicable.append(ic)
            side, month = anchor
            (after if side == "after" else before).setdefault(month, []).append(ic)

        segments: List[Segment] = []
        for month, length in enumerate(lengths, start=1):
            segments.extend(Segment(month, ic.length, ic) for ic in before.get(month, ()))
            segments.append(Segment(month, length))
            segments.extend(Segment(month, ic.length, ic) for ic in after.get(month, ()))

        return YearData(
            is_leap=is_leap,
            month_lengths=tuple(lengths),
            intercalary=tuple(applicable),
            segments=tuple(segments),
            length=sum(s.length for s in segments),
            weekday_length=sum(s.length for s in segments
                               if s.intercalary is None or s.intercalary.counts_for_weekdays),
        )

    def _month_lengths(self, is_leap: bool) -> List[int]:
        cal = self.calendar
        lengths = [max(m.days, 1) for m in cal.months]
        leap = cal.leap_year
        if is_leap and leap.month:
            idx = cal.month_index(leap.month)
            if idx:
                adjusted = lengths[idx - 1] + leap.extra_days
                if adjusted < 1:
                    self._warn_once(f"clamp:{leap.month}",
                                    "Calendar %s: month %r clamped to 1 day (was %d)", cal.id, leap.month, adjusted)
                    adjusted = 1
                lengths[idx - 1] = adjusted
        return lengths

    # ---------------------------------------------------------
    # Year structure
    # ---------------------------------------------------------

    def is_leap_year(self, year: Number) -> bool:
        leap = self.calendar.leap_year
        if leap is None or not _finite(year):
            return False
        if leap.rule == "gregorian":
            return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0
        if leap.rule == "custom":
            if not leap.interval:
                return False
            # Python's % already normalises negative remainders
            return (year - leap.offset) % leap.interval == 0
        return False

    def get_month_lengths(self, year: Number) -> List[int]:
        return list(self._year(year).month_lengths)

    def get_month_length(self, month: int, year: Number) -> int:
        lengths = self._year(year).month_lengths
        return lengths[month - 1] if 1 <= month <= len(lengths) else 0

    def get_year_length(self, year: Number) -> int:
        return self._year(year).length

    def get_intercalary_days(self, year: Number) -> List[Intercalary]:
        return list(self._year(year).intercalary)

    def get_intercalary_days_after_month(self, year: Number, month: int) -> List[Intercalary]:
        if not 1 <= month <= len(self.calendar.months):
            return []
        name = self.calendar.months[month - 1].name
        return [ic for ic in self._year(year).intercalary if ic.after == name]

    def get_intercalary_days_before_month(self, year: Number, month: int) -> List[Intercalary]:
        if not 1 <= month <= len(self.calendar.months):
            return []
        name = self.calendar.months[month - 1].name
        return [ic for ic in self._year(year).intercalary if ic.before == name and self._anchor(ic) == ("before", month)]

    # ---------------------------------------------------------
    # Day counting
    # ---------------------------------------------------------

    def _leap_years_between(self, start: int, end: int) -> int:
        """Number of leap years in [start, end)."""
        leap = self.calendar.leap_year

        def multiples(k: int, shift: int = 0) -> int:
            return (end - shift - 1) // k - (start - shift - 1) // k

        if leap.rule == "gregorian":
            return multiples(4) - multiples(100) + multiples(400)
        if leap.rule == "custom" and leap.interval:
            return multiples(abs(leap.interval), leap.offset)
        return 0

    def _span_days(self, start: int, end: int, *, weekday_only: bool = False) -> int:
        """Signed day count from the start of year ``start`` to the start of year ``end``."""
        if end < start:
            return -self._span_days(end, start, weekday_only=weekday_only)
        leaps = self._leap_years_between(start, end)
        common, leap = self._layouts[False], self._layouts[True]
        if weekday_only:
            return leaps * leap.weekday_length + (end - start - leaps) * common.weekday_length
        return leaps * leap.length + (end - start - leaps) * common.length

    def _days_before_year(self, year: int, *, weekday_only: bool = False) -> int:
        return self._span_days(self.calendar.year.epoch, year, weekday_only=weekday_only)

    @staticmethod
    def _month_offset(data: YearData, month: int, *, include_before: bool = True) -> int:
        if month < 1:
            return 0
        acc = 0
        for seg in data.segments:
            if seg.month == month and (seg.intercalary is None or not include_before):
                return acc
            acc += seg.length
        return acc

    @staticmethod
    def _intercalary_offset(data: YearData, date: CalendarDate) -> Optional[int]:
        acc = 0
        by_name: Optional[int] = None
        for seg in data.segments:
            ic = seg.intercalary
            if ic is not None and ic.name == date.intercalary:
                if seg.month == date.month:
                    return acc
                if by_name is None:
                    by_name = acc
            acc += seg.length
        return by_name

    def _offset_in_year(self, data: YearData, date: CalendarDate) -> int:
        if date.intercalary is not None:
            offset = self._intercalary_offset(data, date)
            if offset is not None:
                return offset + date.day - 1
            # unknown block: place it at the start of its month
            return self._month_offset(data, date.month, include_before=False) + date.day - 1
        return self._month_offset(data, date.month) + date.day - 1

    def days_to_date(self, days: int) -> CalendarDate:
        days = int(days)
        # estimate from the mean year, then settle on the exact year
        year = self.calendar.year.epoch + int(days // self._mean_year_length)
        remaining = days - self._days_before_year(year)
        while remaining < 0:
            year -= 1
            remaining += self._year(year).length
        data = self._year(year)
        while remaining >= data.length:
            remaining -= data.length
            year += 1
            data = self._year(year)

        for seg in data.segments:
            if remaining < seg.length:
                if seg.intercalary is not None:
                    return CalendarDate(year, seg.month, remaining + 1, None, seg.intercalary.name)
                day = remaining + 1
                return CalendarDate(year, seg.month, day, self.calculate_weekday(year, seg.month, day))
            remaining -= seg.length
        raise RuntimeError("unreachable")

    def date_to_days(self, date: CalendarDate) -> Number:
        if not _finite(date.year):
            return math.nan
        year = int(date.year)
        return self._days_before_year(year) + self._offset_in_year(self._year(year), date)

    def get_day_of_year(self, date: CalendarDate) -> int:
        """1-based position of ``date`` in its year, intercalary days included."""
        if not _finite(date.year):
            return 0
        return self._offset_in_year(self._year(date.year), date) + 1

    def calculate_weekday(self, year: Number, month: int, day: int) -> int:
        if not _finite(year):
            return 0
        year = int(year)
        total = self._days_before_year(year, weekday_only=True)
        if month >= 1:
            for seg in self._year(year).segments:
                if seg.intercalary is None and seg.month == month:
                    break
                if seg.intercalary is None or seg.intercalary.counts_for_weekdays:
                    total += seg.length
        total += day - 1

        weekday = (total + self.calendar.year.start_day) % len(self.calendar.weekdays)
        return self.weekday_adjustment(weekday, self.calendar)

    # ---------------------------------------------------------
    # World time
    # ---------------------------------------------------------

    def _compute_real_time_offset(self) -> int:
        wt = self.calendar.world_time
        if wt is None or wt.interpretation != "real-time-based":
            return 0
        return self._span_days(wt.epoch_year, wt.current_year) * seconds_per_day(self.calendar.time)

    def adjust_world_time_for_interpretation(self, world_time: Number) -> Number:
        """Host world time -> seconds since the start of the epoch year."""
        return world_time + self._real_time_offset

    def adjust_world_time_from_interpretation(self, internal_seconds: Number) -> Number:
        return internal_seconds - self._real_time_offset

    def _split(self, seconds: Number) -> Tuple[int, Number]:
        spd = seconds_per_day(self.calendar.time)
        days, seconds_in_day = divmod(seconds, spd)
        if seconds_in_day >= spd:
            days, seconds_in_day = days + 1, seconds_in_day - spd
        return int(days), seconds_in_day

    def _time_of_day(self, seconds_in_day: Number) -> TimeOfDay:
        t = self.calendar.time
        hour, rem = divmod(seconds_in_day, seconds_per_hour(t))
        minute, second = divmod(rem, t.seconds_in_minute)
        if second == 0 or (isinstance(second, float) and second.is_integer()):
            second = int(second)  # also drops -0.0
        return TimeOfDay(int(hour), int(minute), second)

    def _date_seconds(self, date: CalendarDate) -> Number:
        t = self.calendar.time
        seconds = self.date_to_days(date) * seconds_per_day(t)
        if date.time is not None:
            seconds += (date.time.hour * seconds_per_hour(t)
                        + date.time.minute * t.seconds_in_minute
                        + date.time.second)
        return seconds

    def _creation_anchor_seconds(self, moment: UtcMoment) -> Number:
        """Seconds since the epoch of the calendar date the world was created on."""
        base = CalendarDate(
            year=moment.year + self.calendar.year.epoch,
            month=moment.month,
            day=moment.day,
            time=TimeOfDay(moment.hour, moment.minute, moment.second),
        )
        return self._date_seconds(base)

    def _invalid_date(self, world_time: Number) -> CalendarDate:
        if _finite(world_time):
            days, sid = self._split(self.adjust_world_time_for_interpretation(world_time))
        else:
            days, sid = 0, 0
        return replace(self.days_to_date(days), year=math.nan, time=self._time_of_day(sid))

    def world_time_to_date(self, world_time: Number,
                           world_creation_timestamp: Optional[Number] = None) -> CalendarDate:
        """
        Convert host world time (seconds) to a date.

        With ``world_creation_timestamp`` (Unix seconds) the world time is an
        offset from the calendar date matching the real-world UTC creation
        date, year shifted by ``year.epoch``. That anchoring replaces the
        world-time interpretation mode. A non-finite or out-of-range
        timestamp yields a date whose ``year`` is NaN.
        """
        if not _finite(world_time):
            return self._invalid_date(world_time)

        if world_creation_timestamp is None:
            days, sid = self._split(self.adjust_world_time_for_interpretation(world_time))
            return replace(self.days_to_date(days), time=self._time_of_day(sid))

        moment = utc_moment(world_creation_timestamp)
        if moment is None:
            return self._invalid_date(world_time)
        if self._real_time_offset:
            logger.debug("Calendar %s: world creation timestamp overrides real-time-based interpretation",
                         self.calendar.id)
        days, sid = self._split(self._creation_anchor_seconds(moment) + world_time)
        return replace(self.days_to_date(days), time=self._time_of_day(sid))

    def date_to_world_time(self, date: CalendarDate,
                           world_creation_timestamp: Optional[Number] = None) -> Number:
        if world_creation_timestamp is None:
            return self.adjust_world_time_from_interpretation(self._date_seconds(date))
        moment = utc_moment(world_creation_timestamp)
        if moment is None:
            return math.nan
        return self._date_seconds(date) - self._creation_anchor_seconds(moment)

    # ---------------------------------------------------------
    # Arithmetic
    # ---------------------------------------------------------

    def add_days(self, date: CalendarDate, days: int) -> CalendarDate:
        if not date.is_valid:
            return date
        return replace(self.days_to_date(self.date_to_days(date) + days), time=date.time)

    def _clamped(self, year: int, month: int, day: int, time: Optional[TimeOfDay]) -> CalendarDate:
        length = self.get_month_length(month, year)
        if length:
            day = min(day, length)
        return CalendarDate(year, month, day, self.calculate_weekday(year, month, day), None, time)

    def add_months(self, date: CalendarDate, months: int) -> CalendarDate:
        if not date.is_valid:
            return date
        month, year = normalize_month(date.month + months, int(date.year), len(self.calendar.months))
        return self._clamped(year, month, date.day, date.time)

    def add_years(self, date: CalendarDate, years: int) -> CalendarDate:
        if not date.is_valid:
            return date
        return self._clamped(int(date.year) + years, date.month, date.day, date.time)

    def add_hours(self, date: CalendarDate, hours: Number) -> CalendarDate:
        """Fractional hours carry down into minutes and seconds."""
        if not date.is_valid:
            return date
        current = date.time or TimeOfDay()
        whole = math.floor(hours)
        extra_days, hour = divmod(current.hour + whole, self.calendar.time.hours_in_day)
        result = replace(date, time=replace(current, hour=int(hour)))
        if extra_days:
            result = self.add_days(result, int(extra_days))
        if hours != whole:
            result = self.add_minutes(result, _carry(hours - whole, self.calendar.time.minutes_in_hour))
        return result

    def add_minutes(self, date: CalendarDate, minutes: Number) -> CalendarDate:
        if not date.is_valid:
            return date
        current = date.time or TimeOfDay()
        whole = math.floor(minutes)
        extra_hours, minute = divmod(current.minute + whole, self.calendar.time.minutes_in_hour)
        result = replace(date, time=replace(current, minute=int(minute)))
        if extra_hours:
            result = self.add_hours(result, int(extra_hours))
        if minutes != whole:
            result = self._add_seconds(result, _carry(minutes - whole, self.calendar.time.seconds_in_minute))
        return result

    def _add_seconds(self, date: CalendarDate, seconds: Number) -> CalendarDate:
        current = date.time or TimeOfDay()
        extra_minutes, second = divmod(current.second + seconds, self.calendar.time.seconds_in_minute)
        if isinstance(second, float) and second.is_integer():
            second = int(second)
        result = replace(date, time=replace(current, second=second))
        if extra_minutes:
            result = self.add_minutes(result, int(extra_minutes))
        return result

    # ---------------------------------------------------------
    # Weeks, moons, seasons
    # ---------------------------------------------------------

    def get_week_of_month(self, date: CalendarDate) -> Optional[int]:
        return week_of_month(self, date)

    def get_week_info(self, date: CalendarDate) -> Optional[WeekName]:
        return week_info(self, date)

    def calculate_moon_phase_for_date(self, moon: Moon, date: CalendarDate) -> Optional[MoonPhaseInfo]:
        return phase_for_date(self, moon, date)

    def get_moon_phase_info(self, date: CalendarDate, moon_name: Optional[str] = None) -> List[MoonPhaseInfo]:
        if not date.is_valid:
            return []
        out: List[MoonPhaseInfo] = []
        for moon in self.calendar.moons:
            if moon_name is not None and moon.name != moon_name:
                continue
            info = phase_for_date(self, moon, date)
            if info is None:
                self._warn_once(f"moon:{moon.name}",
                                "Calendar %s: moon %r has no phases or no positive cycle length",
                                self.calendar.id, moon.name)
                continue
            out.append(info)
        return out

    def get_all_moons(self, date: Optional[CalendarDate] = None) -> Union[List[Moon], List[MoonPhaseInfo]]:
        """Moon definitions, or their phases on ``date`` when one is given."""
        if date is None:
            return list(self.calendar.moons)
        return self.get_moon_phase_info(date)

    def get_current_moon_phases(self, world_time: Number = 0) -> List[MoonPhaseInfo]:
        return self.get_moon_phase_info(self.world_time_to_date(world_time))

    def get_moon_phase_at_world_time(self, world_time: Number, moon_name: Optional[str] = None) -> List[MoonPhaseInfo]:
        return self.get_moon_phase_info(self.world_time_to_date(world_time), moon_name)

    def get_season(self, date: CalendarDate) -> Optional[Season]:
        idx = find_season_index(date, self.calendar)
        return self.calendar.seasons[idx] if idx >= 0 else None

    def get_sunrise_sunset(self, date: CalendarDate) -> SunTimes:
        return sunrise_sunset(self, date, self.warnings)
