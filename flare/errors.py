"""Exceptions raised by the flare engine."""

from __future__ import annotations

from typing import Optional


class FlareError(Exception):
    """Base class for all flare errors."""


class InvalidDate(FlareError, ValueError):
    """Raised when calendar fields are out of range."""


class ParseError(FlareError, ValueError):
    """Raised when a time string or format tag cannot be parsed."""


class InvalidCoordinate(FlareError, ValueError):
    """Raised when an angle or location is outside its valid range."""


class BelowHorizon(FlareError, ValueError):
    """Raised when an airmass is requested for a position at or below the horizon."""

    def __init__(self, altitude: float) -> None:
        super().__init__(f"Position is below the horizon (altitude {altitude:.3f} deg)")
        self.altitude = altitude


class NoEventError(FlareError, RuntimeError):
    """Raised when the Sun never crosses the requested altitude.

    ``status`` is ``"polar_day"`` when the Sun stays above the threshold and
    ``"polar_night"`` when it stays below.
    """

    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status


class NumericNonConvergence(FlareError, RuntimeError):
    """Raised when the event solver exhausts its iteration cap."""

    def __init__(self, iterations: int, residual_seconds: float) -> None:
        super().__init__(
            f"Solver did not converge after {iterations} iterations "
            f"(last step {residual_seconds:.3f} s)"
        )
        self.iterations = iterations
        self.residual_seconds = residual_seconds
