"""Angle helpers and the geometry shared by targets and observers."""

from __future__ import annotations

import math
from typing import NamedTuple, Tuple

import numpy as np

from .errors import BelowHorizon, InvalidCoordinate

__all__ = [
    "DEGRA",
    "HorizontalPosition",
    "airmass",
    "airmass_array",
    "apparent_altitude",
    "deg2dms",
    "deg2hms",
    "equatorial_to_horizontal",
    "great_circle_distance",
    "horizon_dip",
    "in_ellipse",
    "normalize_degrees",
    "normalize_hour_angle",
    "radec2lb",
    "refraction",
]

DEGRA = math.pi / 180.0

EARTH_EQUATORIAL_RADIUS_M = 6378137.0  # WGS84 equatorial radius in meters.

# Rotation from J2000 equatorial to galactic cartesian coordinates.
_RGE = np.array(
    [
        [-0.054875539, -0.873437105, -0.483834992],
        [0.494109454, -0.444829594, 0.746982249],
        [-0.867666136, -0.198076390, 0.455983795],
    ]
)


class HorizontalPosition(NamedTuple):
    """Altitude and azimuth in degrees; azimuth runs North through East."""

    alt: float
    az: float


def normalize_degrees(angle: float) -> float:
    """Wrap ``angle`` into [0, 360)."""

    wrapped = angle % 360.0
    # Tiny negative inputs round to exactly 360.0.
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def normalize_hour_angle(angle: float) -> float:
    """Wrap ``angle`` into (-180, 180]."""

    wrapped = normalize_degrees(angle)
    if wrapped > 180.0:
        return wrapped - 360.0
    return wrapped


def equatorial_to_horizontal(
    ra: float, dec: float, lat: float, lst: float
) -> HorizontalPosition:
    """Transform an equatorial position to the observer's horizon frame.

    All arguments are in degrees; ``lst`` is the local sidereal time.
    """

    ha = math.radians(normalize_hour_angle(lst - ra))
    dec_rad = math.radians(dec)
    lat_rad = math.radians(lat)
    sin_alt = math.sin(dec_rad) * math.sin(lat_rad) + math.cos(dec_rad) * math.cos(
        lat_rad
    ) * math.cos(ha)
    alt = math.degrees(math.asin(float(np.clip(sin_alt, -1.0, 1.0))))
    az = math.degrees(
        math.atan2(
            -math.sin(ha) * math.cos(dec_rad),
            math.cos(lat_rad) * math.sin(dec_rad)
            - math.sin(lat_rad) * math.cos(dec_rad) * math.cos(ha),
        )
    )
    return HorizontalPosition(alt=alt, az=normalize_degrees(az))


def _pickering_argument(alt):
    # Pickering (2002), with the correction tapered to zero at the zenith.
    correction = 244.0 / (165.0 + 47.0 * alt**1.1)
    return alt + correction * (90.0 - alt) / 90.0


def airmass(alt: float) -> float:
    """Airmass for a true altitude in degrees.

    Raises
    ------
    BelowHorizon
        If ``alt`` is at or below the horizon.
    """

    if not alt > 0.0:
        raise BelowHorizon(alt)
    return 1.0 / math.sin(math.radians(float(_pickering_argument(alt))))


def airmass_array(alt: np.ndarray) -> np.ndarray:
    """Vectorised :func:`airmass`; cells at or below the horizon are ``inf``."""

    alt = np.asarray(alt, dtype=float)
    visible = alt > 0.0
    safe_alt = np.where(visible, alt, 90.0)
    values = 1.0 / np.sin(np.radians(_pickering_argument(safe_alt)))
    return np.where(visible, values, np.inf)


def refraction(
    alt: float, pressure_hpa: float = 1010.0, temperature_c: float = 10.0
) -> float:
    """Atmospheric refraction in degrees for a true altitude ``alt`` (degrees).

    Saemundsson's formula scaled for pressure and temperature. Returns 0 below
    -1 degree, where the formula is no longer meaningful.
    """

    if alt < -1.0:
        return 0.0
    alt = min(alt, 90.0)
    arcmin = 1.02 / math.tan(math.radians(alt + 10.3 / (alt + 5.11)))
    arcmin *= (pressure_hpa / 1010.0) * (283.0 / (273.0 + temperature_c))
    return arcmin / 60.0


def apparent_altitude(
    alt: float, pressure_hpa: float = 1010.0, temperature_c: float = 10.0
) -> float:
    return alt + refraction(alt, pressure_hpa, temperature_c)


def horizon_dip(elevation_m: float) -> float:
    """Dip of the sea-level horizon in degrees for an observer height."""

    if elevation_m <= 0.0:
        return 0.0
    # cos(dip) = R / (R + h)
    ratio = EARTH_EQUATORIAL_RADIUS_M / (EARTH_EQUATORIAL_RADIUS_M + elevation_m)
    return math.degrees(math.acos(float(np.clip(ratio, 0.0, 1.0))))


def great_circle_distance(
    ra1: float, dec1: float, ra2: float, dec2: float
) -> float:
    """Angular distance in degrees between two equatorial positions.

    Uses the Vincenty form, which stays accurate for both tiny and
    near-antipodal separations.
    """

    ra1, dec1, ra2, dec2 = map(math.radians, (ra1, dec1, ra2, dec2))
    delta_ra = abs(ra2 - ra1)
    numerator = math.hypot(
        math.cos(dec2) * math.sin(delta_ra),
        math.cos(dec1) * math.sin(dec2)
        - math.sin(dec1) * math.cos(dec2) * math.cos(delta_ra),
    )
    denominator = math.sin(dec1) * math.sin(dec2) + math.cos(dec1) * math.cos(
        dec2
    ) * math.cos(delta_ra)
    return math.degrees(math.atan2(numerator, denominator))


def radec2lb(ra: float, dec: float) -> Tuple[float, float]:
    """Convert J2000 equatorial coordinates to galactic (l, b) in degrees."""

    ra_rad = math.radians(ra)
    dec_rad = math.radians(dec)
    u = np.array(
        [
            math.cos(ra_rad) * math.cos(dec_rad),
            math.sin(ra_rad) * math.cos(dec_rad),
            math.sin(dec_rad),
        ]
    )
    x, y, z = _RGE @ u
    galactic_l = math.degrees(math.atan2(y, x))
    galactic_b = math.degrees(math.atan2(z, math.hypot(x, y)))
    return normalize_degrees(galactic_l), galactic_b


def deg2hms(ra: float) -> str:
    """Format a right ascension as ``HH:MM:SS.ssss``."""

    if not 0.0 <= ra < 360.0:
        raise InvalidCoordinate(f"Invalid RA input: {ra}")
    total = round(ra / 15.0 * 3600.0, 4)
    hours, remainder = divmod(total, 3600.0)
    minutes, seconds = divmod(remainder, 60.0)
    return f"{int(hours) % 24:02d}:{int(minutes):02d}:{seconds:07.4f}"


def deg2dms(dec: float) -> str:
    """Format a declination as ``±DD:MM:SS.sss``."""

    if not -90.0 <= dec <= 90.0:
        raise InvalidCoordinate(f"Invalid DEC input: {dec}")
    sign = "-" if dec < 0 else "+"
    total = round(abs(dec) * 3600.0, 3)
    degrees, remainder = divmod(total, 3600.0)
    minutes, seconds = divmod(remainder, 60.0)
    return f"{sign}{int(degrees):02d}:{int(minutes):02d}:{seconds:06.3f}"


def in_ellipse(
    ra: float,
    dec: float,
    ra0: float,
    dec0: float,
    semi_major: float,
    axis_ratio: float,
    position_angle: float,
) -> bool:
    """Whether (ra, dec) lies inside a sky ellipse centred on (ra0, dec0).

    ``semi_major`` is in degrees, ``axis_ratio`` is minor/major and
    ``position_angle`` is measured from North through East. The test is made
    on the tangent plane at the ellipse centre.
    """

    if not 0.0 < axis_ratio <= 1.0:
        raise InvalidCoordinate(f"Axis ratio must be within (0, 1]: {axis_ratio}")
    if not 0.0 < semi_major < 90.0:
        raise InvalidCoordinate(f"Semi-major axis must be within (0, 90): {semi_major}")

    d_ra = math.radians(ra - ra0)
    dec_rad = math.radians(dec)
    dec0_rad = math.radians(dec0)
    cos_c = math.sin(dec0_rad) * math.sin(dec_rad) + math.cos(dec0_rad) * math.cos(
        dec_rad
    ) * math.cos(d_ra)
    if cos_c <= 0.0:
        return False
    xi = math.cos(dec_rad) * math.sin(d_ra) / cos_c
    eta = (
        math.cos(dec0_rad) * math.sin(dec_rad)
        - math.sin(dec0_rad) * math.cos(dec_rad) * math.cos(d_ra)
    ) / cos_c

    pa = math.radians(position_angle)
    along = xi * math.sin(pa) + eta * math.cos(pa)
    across = xi * math.cos(pa) - eta * math.sin(pa)
    major = math.tan(math.radians(semi_major))
    minor = major * axis_ratio
    return (along / major) ** 2 + (across / minor) ** 2 <= 1.0
