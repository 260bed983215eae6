"""Sunrise, sunset and twilight crossings of a fixed solar altitude."""

from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from .errors import NoEventError, NumericNonConvergence
from .spatial import normalize_hour_angle
from .sun import SunPosition, sun_position
from .time import SECONDS_PER_DAY, Time

if TYPE_CHECKING:
    from .observer import Observer

__all__ = [
    "DEFAULT_HORIZON",
    "MAX_ITERATIONS",
    "MAX_SEARCH_DAYS",
    "TOLERANCE_SECONDS",
    "TWILIGHT_ANGLES",
    "next_event",
    "solve_crossing",
    "sun_events",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_HORIZON = -0.833  # Refraction plus the solar semidiameter.

TWILIGHT_ANGLES: Dict[str, float] = {
    "official": DEFAULT_HORIZON,
    "civil": -6.0,
    "nautical": -12.0,
    "astronomical": -18.0,
}

MAX_ITERATIONS = 10
TOLERANCE_SECONDS = 1.0
MAX_SEARCH_DAYS = 2

SOLAR_HOUR_ANGLE_RATE = 360.0  # Mean rate of the Sun's hour angle, degrees per day.


def _local_day_start(jd: float, lon: float) -> float:
    """UTC Julian Date of local mean midnight opening the day that holds ``jd``."""

    shift = lon / 360.0
    return math.floor(jd + shift - 0.5) + 0.5 - shift


def _cos_hour_angle(
    lat: float, sin_horizon: float, instant: Time
) -> Tuple[float, SunPosition]:
    sun = sun_position(instant)
    dec = math.radians(sun.dec)
    numerator = sin_horizon - math.sin(lat) * math.sin(dec)
    denominator = math.cos(lat) * math.cos(dec)
    if abs(denominator) < 1e-12:
        return math.copysign(math.inf, numerator), sun
    return numerator / denominator, sun


def solve_crossing(
    observer: Observer,
    day_start: float,
    horizon: float,
    rising: bool,
    max_iterations: int = MAX_ITERATIONS,
    tolerance_seconds: float = TOLERANCE_SECONDS,
) -> Time:
    """Find the Sun's crossing of ``horizon`` during one local day.

    Starting from local mean noon, each pass evaluates the Sun's position at
    the current estimate, solves the hour-angle equation for the threshold
    and moves the estimate to the matching hour angle. When the threshold is
    only grazed, the equation has no solution at noon; it is then retried at
    the local midnight next to the crossing (the opening one for a rising
    crossing, the closing one for a setting crossing).

    Parameters
    ----------
    observer:
        Location of the observer.
    day_start:
        Julian Date (UTC) of the local mean midnight opening the day.
    horizon:
        Altitude threshold in degrees.
    rising:
        Select the morning (rising) root instead of the evening one.

    Raises
    ------
    NoEventError
        If the Sun stays on one side of ``horizon`` at the current estimate.
    NumericNonConvergence
        If the last step still exceeds ``tolerance_seconds`` after
        ``max_iterations`` passes.
    """

    lat = math.radians(observer.lat)
    sin_horizon = math.sin(math.radians(horizon))
    estimate = day_start + 0.5
    grazing_retried = False
    wrap = False
    step_seconds = math.inf

    for iteration in range(1, max_iterations + 1):
        instant = Time.from_jd(estimate)
        cos_h0, sun = _cos_hour_angle(lat, sin_horizon, instant)
        if abs(cos_h0) > 1.0 and not grazing_retried:
            grazing_retried = True
            wrap = True
            estimate = day_start if rising else day_start + 1.0
            instant = Time.from_jd(estimate)
            cos_h0, sun = _cos_hour_angle(lat, sin_horizon, instant)
            LOGGER.debug(
                json.dumps(
                    {
                        "event": "sun_crossing_grazing",
                        "rising": rising,
                        "horizon": horizon,
                        "jd": estimate,
                        "found": abs(cos_h0) <= 1.0,
                    }
                )
            )
        if cos_h0 < -1.0:
            raise NoEventError(
                f"Sun stays above {horizon} deg on the day starting at JD {day_start}",
                status="polar_day",
            )
        if cos_h0 > 1.0:
            raise NoEventError(
                f"Sun stays below {horizon} deg on the day starting at JD {day_start}",
                status="polar_night",
            )

        h0 = math.degrees(math.acos(cos_h0))
        target = -h0 if rising else h0
        current = normalize_hour_angle(instant.to_lst(observer.lon) - sun.ra)
        delta = target - current
        # From noon the first step may exceed half a turn; later steps are small.
        if wrap:
            delta = normalize_hour_angle(delta)
        wrap = True
        step = delta / SOLAR_HOUR_ANGLE_RATE
        estimate += step
        step_seconds = abs(step) * SECONDS_PER_DAY
        if step_seconds < tolerance_seconds:
            LOGGER.debug(
                json.dumps(
                    {
                        "event": "sun_crossing_solved",
                        "rising": rising,
                        "horizon": horizon,
                        "jd": estimate,
                        "iterations": iteration,
                    }
                )
            )
            return Time.from_jd(estimate)

    raise NumericNonConvergence(max_iterations, step_seconds)


def next_event(
    observer: Observer,
    time: Time,
    horizon: float = DEFAULT_HORIZON,
    rising: bool = True,
    max_iterations: int = MAX_ITERATIONS,
    tolerance_seconds: float = TOLERANCE_SECONDS,
    max_search_days: int = MAX_SEARCH_DAYS,
) -> Time:
    """Return the first crossing of ``horizon`` strictly after ``time``.

    Days are scanned from the local day before the one holding ``time`` up to
    ``max_search_days`` days after it. Days without a crossing are skipped;
    if none of them has one, the last :class:`NoEventError` is raised.
    """

    first_day = _local_day_start(time.jd, observer.lon) - 1.0
    failure: Optional[NoEventError] = None

    for offset in range(max_search_days + 2):
        day_start = first_day + offset
        try:
            event = solve_crossing(
                observer, day_start, horizon, rising, max_iterations, tolerance_seconds
            )
        except NoEventError as exc:
            LOGGER.debug(
                json.dumps(
                    {
                        "event": "sun_crossing_missing",
                        "rising": rising,
                        "horizon": horizon,
                        "day_start": day_start,
                        "status": exc.status,
                    }
                )
            )
            failure = exc
            continue
        if event.jd > time.jd:
            return event

    if failure is not None:
        raise failure
    raise NoEventError(
        f"No crossing of {horizon} deg within {max_search_days} days of {time}"
    )


def sun_events(
    observer: Observer, time: Time, horizon: float = DEFAULT_HORIZON
) -> Tuple[Time, Time]:
    """Next rising and next setting crossing of ``horizon`` after ``time``."""

    sunrise = next_event(observer, time, horizon, rising=True)
    sunset = next_event(observer, time, horizon, rising=False)
    return sunrise, sunset
