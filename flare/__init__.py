"""Astronomical time, coordinates and solar events."""

from .clock import FixedClock, SystemClock, UtcTimestamp
from .cosmo import Cosmo
from .errors import (
    BelowHorizon,
    FlareError,
    InvalidCoordinate,
    InvalidDate,
    NoEventError,
    NumericNonConvergence,
    ParseError,
)
from .events import TWILIGHT_ANGLES
from .observer import Observer
from .target import Target
from .time import Time

__version__ = "0.1.0"

__all__ = [
    "BelowHorizon",
    "Cosmo",
    "FixedClock",
    "FlareError",
    "InvalidCoordinate",
    "InvalidDate",
    "NoEventError",
    "NumericNonConvergence",
    "Observer",
    "ParseError",
    "SystemClock",
    "TWILIGHT_ANGLES",
    "Target",
    "Time",
    "UtcTimestamp",
]
