"""Low-precision solar ephemeris.

Apparent solar coordinates from the Astronomical Almanac's low-precision
formulae, good to about 0.01 degree between 1950 and 2050. That is enough to
time sunrise and sunset to within tens of seconds.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from .spatial import normalize_degrees
from .time import J2000_JD, Time

__all__ = ["SunPosition", "sun_ecliptic_longitude", "sun_position"]


class SunPosition(NamedTuple):
    """Apparent equatorial position of the Sun in degrees."""

    ra: float
    dec: float


def _days_since_j2000(time: Time) -> float:
    return time.jd - J2000_JD


def sun_ecliptic_longitude(time: Time) -> float:
    """Apparent ecliptic longitude of the Sun in degrees, within [0, 360)."""

    n = _days_since_j2000(time)
    mean_longitude = (280.460 + 0.9856474 * n) % 360.0
    mean_anomaly = math.radians((357.528 + 0.9856003 * n) % 360.0)
    longitude = (
        mean_longitude
        + 1.915 * math.sin(mean_anomaly)
        + 0.020 * math.sin(2.0 * mean_anomaly)
    )
    return normalize_degrees(longitude)


def sun_position(time: Time) -> SunPosition:
    n = _days_since_j2000(time)
    longitude = math.radians(sun_ecliptic_longitude(time))
    obliquity = math.radians(23.439 - 0.0000004 * n)
    ra = math.degrees(
        math.atan2(math.cos(obliquity) * math.sin(longitude), math.cos(longitude))
    )
    dec = math.degrees(math.asin(math.sin(obliquity) * math.sin(longitude)))
    return SunPosition(ra=normalize_degrees(ra), dec=dec)
