"""Fixed equatorial targets."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

import numpy as np

from .errors import InvalidCoordinate
from .spatial import (
    HorizontalPosition,
    airmass,
    apparent_altitude,
    deg2dms,
    deg2hms,
    great_circle_distance,
    normalize_degrees,
    normalize_hour_angle,
    radec2lb,
)
from .time import Time

if TYPE_CHECKING:
    from .observer import Observer

__all__ = ["Target"]


@dataclass(frozen=True)
class Target:
    """A sky position: right ascension and declination in degrees.

    ``ra`` is wrapped into [0, 360); a declination outside [-90, 90] raises
    :class:`~flare.errors.InvalidCoordinate`.
    """

    ra: float
    dec: float
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.ra) and math.isfinite(self.dec)):
            raise InvalidCoordinate(f"Coordinates must be finite: ({self.ra}, {self.dec})")
        if not -90.0 <= self.dec <= 90.0:
            raise InvalidCoordinate(f"Declination must be within [-90, 90]: {self.dec}")
        object.__setattr__(self, "ra", normalize_degrees(float(self.ra)))
        object.__setattr__(self, "dec", float(self.dec))

    def separation(self, other: Target) -> float:
        """Angular separation from ``other`` in degrees, within [0, 180]."""

        return great_circle_distance(self.ra, self.dec, other.ra, other.dec)

    def separations(self, others: Iterable[Target]) -> np.ndarray:
        return np.array([self.separation(other) for other in others], dtype=float)

    def hour_angle(self, observer: Observer, time: Time) -> float:
        return normalize_hour_angle(observer.local_sidereal_time(time) - self.ra)

    def horizontal(self, observer: Observer, time: Time) -> HorizontalPosition:
        return observer.horizontal(self.ra, self.dec, time)

    def altitude(self, observer: Observer, time: Time, apparent: bool = False) -> float:
        """Altitude in degrees; ``apparent`` adds atmospheric refraction."""

        alt = self.horizontal(observer, time).alt
        if apparent:
            return apparent_altitude(alt)
        return alt

    def airmass(self, observer: Observer, time: Time) -> float:
        """Airmass seen by ``observer`` at ``time``.

        Raises :class:`~flare.errors.BelowHorizon` when the target is not up.
        """

        return airmass(self.altitude(observer, time))

    def to_hmsdms(self) -> Tuple[str, str]:
        return deg2hms(self.ra), deg2dms(self.dec)

    def to_galactic(self) -> Tuple[float, float]:
        return radec2lb(self.ra, self.dec)

    def __str__(self) -> str:
        if self.name is not None:
            return f"Name: {self.name}, RA: {self.ra}, DEC: {self.dec}"
        return f"RA: {self.ra}, DEC: {self.dec} (no name)"
