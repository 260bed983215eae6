"""Pydantic models for API requests and responses."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Twilight(str, Enum):
    """Enumeration of supported twilight definitions."""

    official = "official"
    civil = "civil"
    nautical = "nautical"
    astronomical = "astronomical"


class TimeFormat(str, Enum):
    """Representations accepted by the ``/time`` endpoint."""

    iso = "iso"
    jd = "jd"
    mjd = "mjd"


class SunQueryParams(BaseModel):
    """Validated query parameters for the ``/sun`` endpoint."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    elev_m: float = Field(0.0, ge=-500.0, description="Observer elevation in meters")
    time: Optional[str] = Field(
        None, description="Reference instant in UTC (ISO-8601); defaults to now"
    )
    twilight: Twilight = Field(Twilight.official, description="Twilight definition")


class SunResponse(BaseModel):
    """Successful sunrise/sunset response payload."""

    ok: bool = True
    status: str = Field(..., description="Computation status")
    reference_utc: str = Field(..., description="Reference instant (ISO-8601)")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    elevation_m: float = Field(..., description="Elevation above mean sea level")
    twilight: Twilight = Field(..., description="Applied twilight definition")
    horizon_deg: float = Field(
        ..., description="Solar altitude threshold after the horizon dip correction"
    )
    sunrise_utc: Optional[str] = Field(
        None, description="Next sunrise in UTC (ISO-8601)"
    )
    sunset_utc: Optional[str] = Field(None, description="Next sunset in UTC (ISO-8601)")
    source: Literal["low-precision"] = Field(
        "low-precision", description="Solar ephemeris identifier"
    )


class AirmassQueryParams(BaseModel):
    """Validated query parameters for the ``/airmass`` endpoint."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    elev_m: float = Field(0.0, ge=-500.0, description="Observer elevation in meters")
    ra: float = Field(..., ge=0.0, lt=360.0, description="Right ascension in degrees")
    dec: float = Field(..., ge=-90.0, le=90.0, description="Declination in degrees")
    time: Optional[str] = Field(
        None, description="Instant in UTC (ISO-8601); defaults to now"
    )


class AirmassResponse(BaseModel):
    """Horizontal position and airmass of a target."""

    ok: bool = True
    time_utc: str
    altitude: float = Field(..., description="Altitude in degrees")
    azimuth: float = Field(..., description="Azimuth in degrees, North through East")
    visible: bool = Field(..., description="Whether the target is above the horizon")
    airmass: Optional[float] = Field(
        None, description="Airmass, null when the target is below the horizon"
    )


class TimeQueryParams(BaseModel):
    """Validated query parameters for the ``/time`` endpoint."""

    value: str = Field(..., description="Instant to convert")
    format: TimeFormat = Field(TimeFormat.iso, description="Representation of value")


class TimeResponse(BaseModel):
    """Every representation of an instant."""

    ok: bool = True
    jd: float
    mjd: float
    gst: float = Field(..., description="Greenwich sidereal time in degrees")
    utc: str
    iso: str


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    ephemeris: str
    version: str


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
