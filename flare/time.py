"""Absolute instants stored as a single UTC Julian Date.

All conversions (calendar fields, MJD, sidereal time, ISO text) are pure
functions of the stored Julian Date. Calendar arithmetic follows Meeus,
*Astronomical Algorithms*, chapter 7, using the proleptic Gregorian calendar
for every date.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from . import clock as clocks
from .clock import Clock, UtcTimestamp
from .errors import InvalidDate, ParseError

__all__ = [
    "Time",
    "J2000_JD",
    "MJD_OFFSET",
    "SECONDS_PER_DAY",
    "calendar_to_jd",
    "jd_to_calendar",
]

J2000_JD = 2451545.0
MJD_OFFSET = 2400000.5
SECONDS_PER_DAY = 86400.0
DAYS_PER_CENTURY = 36525.0
MICROSECONDS_PER_DAY = 86_400_000_000
MIN_YEAR = -4712

_ISO_PATTERN = re.compile(
    r"^(?P<year>-?\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"[T ](?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}(?:\.\d+)?)"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})?$"
)


def _is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _days_in_month(year: int, month: int) -> int:
    if month == 2:
        return 29 if _is_leap_year(year) else 28
    if month in (4, 6, 9, 11):
        return 30
    return 31


def _check_fields(
    year: int, month: int, day: int, hour: int, minute: int, second: float
) -> None:
    if year < MIN_YEAR:
        raise InvalidDate(f"Year must be >= {MIN_YEAR}: {year}")
    if not 1 <= month <= 12:
        raise InvalidDate(f"Month must be within 1-12: {month}")
    if not 1 <= day <= _days_in_month(year, month):
        raise InvalidDate(f"Day {day} is not valid for {year:04d}-{month:02d}")
    if not 0 <= hour <= 23:
        raise InvalidDate(f"Hour must be within 0-23: {hour}")
    if not 0 <= minute <= 59:
        raise InvalidDate(f"Minute must be within 0-59: {minute}")
    if not (math.isfinite(second) and 0 <= second < 60):
        raise InvalidDate(f"Second must be within 0-59: {second}")


def calendar_to_jd(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: float = 0.0
) -> float:
    """Convert proleptic Gregorian calendar fields to a Julian Date."""

    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    whole = math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + b
    day_fraction = (hour * 3600 + minute * 60 + second) / SECONDS_PER_DAY
    return (whole - 1524.5 + day) + day_fraction


def jd_to_calendar(jd: float, ticks_per_day: int = 86400) -> Tuple[int, int, int, int]:
    """Invert :func:`calendar_to_jd`.

    Returns ``(year, month, day, ticks)`` where ``ticks`` counts the elapsed
    fraction of the day in units of ``1 / ticks_per_day``, rounded to the
    nearest tick. A fraction that rounds up to a whole day carries into the
    following date.
    """

    shifted = jd + 0.5
    z = math.floor(shifted)
    ticks = round((shifted - z) * ticks_per_day)
    if ticks >= ticks_per_day:
        z += 1
        ticks -= ticks_per_day
    alpha = math.floor((z - 1867216.25) / 36524.25)
    a = z + 1 + alpha - math.floor(alpha / 4)
    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)
    day = b - d - math.floor(30.6001 * e)
    month = e - 1 if e < 14 else e - 13
    year = c - 4716 if month > 2 else c - 4715
    return int(year), int(month), int(day), int(ticks)


def _format_year(year: int) -> str:
    if year < 0:
        return f"-{-year:04d}"
    return f"{year:04d}"


@dataclass(frozen=True, order=True, init=False)
class Time:
    """An immutable UTC instant.

    ``Time(2000, 1, 1, 12)`` builds an instant from calendar fields; the
    ``from_*`` class methods build one from other representations.
    """

    jd: float

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: float = 0,
    ) -> None:
        _check_fields(year, month, day, hour, minute, second)
        object.__setattr__(self, "jd", calendar_to_jd(year, month, day, hour, minute, second))

    @classmethod
    def from_jd(cls, jd: float) -> Time:
        jd = float(jd)
        if not math.isfinite(jd):
            raise InvalidDate(f"Julian Date must be finite: {jd}")
        instance = cls.__new__(cls)
        object.__setattr__(instance, "jd", jd)
        return instance

    @classmethod
    def from_mjd(cls, mjd: float) -> Time:
        return cls.from_jd(float(mjd) + MJD_OFFSET)

    @classmethod
    def from_iso(cls, text: str) -> Time:
        """Parse ``YYYY-MM-DDTHH:MM:SS[.fff][Z|+HH:MM]``.

        Offsets other than UTC are folded into the instant, so the result is
        always UTC.
        """

        if not isinstance(text, str):
            raise ParseError(f"ISO time must be a string, got {type(text).__name__}")
        match = _ISO_PATTERN.match(text.strip())
        if match is None:
            raise ParseError(f"Malformed ISO-8601 time: {text!r}")
        instant = cls(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            float(match["second"]),
        )
        offset = match["offset"]
        if offset and offset != "Z":
            sign = -1 if offset[0] == "-" else 1
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            if hours > 23 or minutes > 59:
                raise ParseError(f"Malformed UTC offset: {offset!r}")
            instant = cls.from_jd(instant.jd - sign * (hours * 60 + minutes) / 1440.0)
        return instant

    @classmethod
    def from_utc(cls, value: Union[UtcTimestamp, Mapping[str, int], datetime]) -> Time:
        """Build an instant from an external UTC timestamp.

        ``value`` may be a :class:`~flare.clock.UtcTimestamp`, a mapping with
        the same keys, or a timezone-aware :class:`datetime.datetime`.
        """

        if isinstance(value, datetime):
            if value.tzinfo is None:
                raise InvalidDate("datetime must be timezone-aware (UTC)")
            dt_utc = value.astimezone(UTC)
            fields = UtcTimestamp(
                dt_utc.year,
                dt_utc.month,
                dt_utc.day,
                dt_utc.hour,
                dt_utc.minute,
                dt_utc.second,
                dt_utc.microsecond * 1000,
            )
        else:
            try:
                if isinstance(value, Mapping):
                    fields = UtcTimestamp(**value)
                else:
                    fields = UtcTimestamp(*value)
            except TypeError as exc:
                raise InvalidDate(f"Unsupported UTC timestamp: {value!r}") from exc
        if not 0 <= fields.nanosecond < 1_000_000_000:
            raise InvalidDate(f"Nanosecond must be within 0-999999999: {fields.nanosecond}")
        _check_fields(
            fields.year, fields.month, fields.day, fields.hour, fields.minute, fields.second
        )
        return cls(
            fields.year,
            fields.month,
            fields.day,
            fields.hour,
            fields.minute,
            fields.second + fields.nanosecond / 1e9,
        )

    from_datetime = from_utc

    @classmethod
    def now(cls, clock: Optional[Clock] = None) -> Time:
        source = clock if clock is not None else clocks.DEFAULT_CLOCK
        return cls.from_utc(source.now())

    def to_jd(self) -> float:
        return self.jd

    def to_mjd(self) -> float:
        return self.jd - MJD_OFFSET

    def to_gst(self) -> float:
        """Greenwich mean sidereal time in degrees, within [0, 360)."""

        d = self.jd - J2000_JD
        t = d / DAYS_PER_CENTURY
        gst = (
            280.46061837
            + 360.98564736629 * d
            + 0.000387933 * t * t
            - t * t * t / 38710000.0
        )
        return gst % 360.0

    def to_lst(self, longitude: float) -> float:
        """Local sidereal time in degrees for an east-positive longitude."""

        return (self.to_gst() + longitude) % 360.0

    def to_calendar(self) -> Tuple[int, int, int, int, int, int]:
        year, month, day, seconds = jd_to_calendar(self.jd)
        hour, remainder = divmod(seconds, 3600)
        minute, second = divmod(remainder, 60)
        return year, month, day, hour, minute, second

    def to_datetime(self) -> datetime:
        year, month, day, microseconds = jd_to_calendar(self.jd, MICROSECONDS_PER_DAY)
        try:
            midnight = datetime(year, month, day, tzinfo=UTC)
        except ValueError as exc:
            raise InvalidDate(f"Year {year} cannot be represented as a datetime") from exc
        return midnight + timedelta(microseconds=microseconds)

    def to_iso(self) -> str:
        year, month, day, hour, minute, second = self.to_calendar()
        return (
            f"{_format_year(year)}-{month:02d}-{day:02d}"
            f"T{hour:02d}:{minute:02d}:{second:02d}"
        )

    def to_utc_string(self) -> str:
        year, month, day, hour, minute, second = self.to_calendar()
        return (
            f"{_format_year(year)}-{month:02d}-{day:02d} "
            f"{hour:02d}:{minute:02d}:{second:02d} UTC"
        )

    def to_string(self, format: Optional[str] = None) -> str:
        """Render the instant using one of the tags in :data:`FORMATS`.

        ``"gst"`` is always Greenwich sidereal time; use :meth:`to_lst` for a
        local value. ``None`` selects ``"utc"``.
        """

        tag = "utc" if format is None else format.lower()
        try:
            formatter = FORMATS[tag]
        except KeyError as exc:
            raise ParseError(f"Unsupported time format: {format!r}") from exc
        return formatter(self)

    def __str__(self) -> str:
        return self.to_utc_string()

    def __add__(self, days: float) -> Time:
        if isinstance(days, Time):
            return NotImplemented
        return Time.from_jd(self.jd + days)

    def __sub__(self, other: Union[Time, float]) -> Union[Time, float]:
        """``time - time`` is a difference in days; ``time - days`` is a new instant."""

        if isinstance(other, Time):
            return self.jd - other.jd
        return Time.from_jd(self.jd - other)


FORMATS: Dict[str, Callable[[Time], str]] = {
    "jd": lambda time: repr(time.jd),
    "mjd": lambda time: repr(time.to_mjd()),
    "gst": lambda time: repr(time.to_gst()),
    "utc": Time.to_utc_string,
    "iso": Time.to_iso,
    "isot": Time.to_iso,
}
