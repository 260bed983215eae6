"""Ground-based observers and the operations that depend on their location."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import numpy as np

from .clock import Clock
from .errors import InvalidCoordinate
from .events import DEFAULT_HORIZON, TWILIGHT_ANGLES, sun_events
from .spatial import (
    HorizontalPosition,
    airmass_array,
    equatorial_to_horizontal,
    horizon_dip,
)
from .sun import sun_position
from .time import Time

if TYPE_CHECKING:
    from .target import Target

__all__ = ["Observer"]


@dataclass(frozen=True)
class Observer:
    """Geodetic location: latitude and east-positive longitude in degrees."""

    lat: float
    lon: float
    elevation: float = 0.0
    name: Optional[str] = None

    def __post_init__(self) -> None:
        values = (self.lat, self.lon, self.elevation)
        if not all(math.isfinite(value) for value in values):
            raise InvalidCoordinate(f"Observer location must be finite: {values}")
        if not -90.0 <= self.lat <= 90.0:
            raise InvalidCoordinate(f"Latitude must be within [-90, 90]: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise InvalidCoordinate(f"Longitude must be within [-180, 180]: {self.lon}")

    def local_sidereal_time(self, time: Time) -> float:
        return time.to_lst(self.lon)

    def horizontal(self, ra: float, dec: float, time: Time) -> HorizontalPosition:
        return equatorial_to_horizontal(ra, dec, self.lat, self.local_sidereal_time(time))

    def sun_altaz(self, time: Time) -> HorizontalPosition:
        sun = sun_position(time)
        return self.horizontal(sun.ra, sun.dec, time)

    def horizon_dip(self) -> float:
        return horizon_dip(self.elevation)

    def targets_airmasses(
        self, targets: Sequence[Target], times: Sequence[Time]
    ) -> np.ndarray:
        """Airmass grid of shape ``(len(targets), len(times))``.

        Cells where the target is at or below the horizon hold ``inf``.
        """

        ra = np.radians(np.array([target.ra for target in targets], dtype=float))
        dec = np.radians(np.array([target.dec for target in targets], dtype=float))
        lst = np.radians(
            np.array([self.local_sidereal_time(time) for time in times], dtype=float)
        )
        lat = math.radians(self.lat)
        hour_angle = lst[np.newaxis, :] - ra[:, np.newaxis]
        sin_alt = np.sin(dec)[:, np.newaxis] * math.sin(lat) + np.cos(dec)[
            :, np.newaxis
        ] * math.cos(lat) * np.cos(hour_angle)
        alt = np.degrees(np.arcsin(np.clip(sin_alt, -1.0, 1.0)))
        return airmass_array(alt)

    def sun_set_time(
        self,
        time: Optional[Time] = None,
        horizon: Optional[float] = None,
        clock: Optional[Clock] = None,
    ) -> Tuple[Time, Time]:
        """Next sunrise and next sunset after ``time``.

        Parameters
        ----------
        time:
            Reference instant; defaults to now, read from ``clock``.
        horizon:
            Solar altitude in degrees that counts as rising/setting; defaults
            to -0.833.

        Returns
        -------
        tuple[Time, Time]
            ``(sunrise, sunset)``, each the first crossing after ``time``.

        Raises
        ------
        NoEventError
            If the Sun does not cross ``horizon`` within the search window.
        """

        if time is None:
            time = Time.now(clock)
        if horizon is None:
            horizon = DEFAULT_HORIZON
        return sun_events(self, time, horizon)

    def twilight_civil(
        self, time: Optional[Time] = None, clock: Optional[Clock] = None
    ) -> Tuple[Time, Time]:
        return self.sun_set_time(time, TWILIGHT_ANGLES["civil"], clock)

    def twilight_nautical(
        self, time: Optional[Time] = None, clock: Optional[Clock] = None
    ) -> Tuple[Time, Time]:
        return self.sun_set_time(time, TWILIGHT_ANGLES["nautical"], clock)

    def twilight_astronomical(
        self, time: Optional[Time] = None, clock: Optional[Clock] = None
    ) -> Tuple[Time, Time]:
        return self.sun_set_time(time, TWILIGHT_ANGLES["astronomical"], clock)

    def __str__(self) -> str:
        if self.name is not None:
            return (
                f"Name: {self.name}, Lat: {self.lat}, Lon: {self.lon}, "
                f"Elevation: {self.elevation}"
            )
        return f"Lat: {self.lat}, Lon: {self.lon}, Elevation: {self.elevation} (no name)"
