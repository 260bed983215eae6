"""FastAPI application exposing the flare engine."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Annotated, Dict, List, Optional, Tuple, Type

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import flare
from flare import (
    BelowHorizon,
    FlareError,
    InvalidCoordinate,
    InvalidDate,
    NoEventError,
    NumericNonConvergence,
    Observer,
    ParseError,
    Target,
    Time,
)
from flare.events import TWILIGHT_ANGLES, next_event
from models import (
    AirmassQueryParams,
    AirmassResponse,
    ErrorResponse,
    HealthResponse,
    SunQueryParams,
    SunResponse,
    TimeFormat,
    TimeQueryParams,
    TimeResponse,
)

logging.basicConfig(
    level=os.environ.get("FLARE_LOG_LEVEL", "INFO").upper(), format="%(message)s"
)
LOGGER = logging.getLogger("flare-api")

APP_DESCRIPTION = (
    "Time conversions, airmass and sunrise/sunset/twilight times "
    "from a low-precision solar ephemeris"
)


def _cors_origins() -> List[str]:
    raw = os.environ.get("FLARE_CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - exercised in integration tests
    LOGGER.info(
        json.dumps(
            {"event": "startup", "version": flare.__version__, "cors": _cors_origins()}
        )
    )
    yield


app = FastAPI(
    title="Flare API",
    description=APP_DESCRIPTION,
    version=flare.__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


# Most specific class first; ``FlareError`` catches anything left over.
_FLARE_ERRORS: Tuple[Tuple[Type[FlareError], int, str], ...] = (
    (InvalidDate, 400, "invalid_date"),
    (ParseError, 400, "parse_error"),
    (InvalidCoordinate, 400, "invalid_coordinate"),
    (BelowHorizon, 400, "below_horizon"),
    (NoEventError, 404, "no_event"),
    (NumericNonConvergence, 500, "non_convergence"),
    (FlareError, 500, "engine_error"),
)


def _reference_time(text: Optional[str]) -> Time:
    if text is None:
        return Time.now()
    return Time.from_iso(text)


@app.exception_handler(FlareError)
async def flare_exception_handler(request: Request, exc: FlareError) -> JSONResponse:
    status_code, code = next(
        (status, code) for kind, status, code in _FLARE_ERRORS if isinstance(exc, kind)
    )
    return _error_response(status_code, code, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'request'}: {error['msg']}"
        for error in exc.errors()
    )
    return _error_response(422, "validation_error", messages)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception(
        json.dumps({"event": "unhandled_exception", "path": request.url.path}),
        exc_info=exc,
    )
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, ephemeris="low-precision", version=flare.__version__)


@app.get(
    "/sun",
    response_model=SunResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def sun_endpoint(params: Annotated[SunQueryParams, Query()]) -> SunResponse:
    start_time = time.perf_counter()
    reference = _reference_time(params.time)
    observer = Observer(params.lat, params.lon, params.elev_m)

    horizon = TWILIGHT_ANGLES[params.twilight.value] - observer.horizon_dip()
    events: Dict[str, Optional[Time]] = {}
    failures: List[NoEventError] = []
    for key, rising in (("sunrise", True), ("sunset", False)):
        try:
            events[key] = next_event(observer, reference, horizon, rising=rising)
        except NoEventError as exc:
            events[key] = None
            failures.append(exc)

    if events["sunrise"] is not None or events["sunset"] is not None:
        status = "ok"
    else:
        status = failures[-1].status or "indeterminate"

    response = SunResponse(
        status=status,
        reference_utc=reference.to_iso(),
        latitude=params.lat,
        longitude=params.lon,
        elevation_m=params.elev_m,
        twilight=params.twilight,
        horizon_deg=horizon,
        sunrise_utc=events["sunrise"].to_iso() if events["sunrise"] is not None else None,
        sunset_utc=events["sunset"].to_iso() if events["sunset"] is not None else None,
    )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "sun",
                "lat": params.lat,
                "lon": params.lon,
                "time": response.reference_utc,
                "twilight": params.twilight.value,
                "status": response.status,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/airmass",
    response_model=AirmassResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def airmass_endpoint(params: Annotated[AirmassQueryParams, Query()]) -> AirmassResponse:
    instant = _reference_time(params.time)
    observer = Observer(params.lat, params.lon, params.elev_m)
    target = Target(params.ra, params.dec)

    position = target.horizontal(observer, instant)
    try:
        airmass: Optional[float] = target.airmass(observer, instant)
    except BelowHorizon:
        airmass = None

    LOGGER.info(
        json.dumps(
            {
                "event": "airmass",
                "ra": params.ra,
                "dec": params.dec,
                "time": instant.to_iso(),
                "altitude": round(position.alt, 4),
            }
        )
    )
    return AirmassResponse(
        time_utc=instant.to_iso(),
        altitude=position.alt,
        azimuth=position.az,
        visible=airmass is not None,
        airmass=airmass,
    )


def _parse_instant(value: str, format: TimeFormat) -> Time:
    if format is TimeFormat.iso:
        return Time.from_iso(value)
    try:
        number = float(value)
    except ValueError as exc:
        raise ParseError(f"Not a number: {value!r}") from exc
    if format is TimeFormat.jd:
        return Time.from_jd(number)
    return Time.from_mjd(number)


@app.get(
    "/time",
    response_model=TimeResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def time_endpoint(params: Annotated[TimeQueryParams, Query()]) -> TimeResponse:
    instant = _parse_instant(params.value, params.format)
    return TimeResponse(
        jd=instant.to_jd(),
        mjd=instant.to_mjd(),
        gst=instant.to_gst(),
        utc=instant.to_string("utc"),
        iso=instant.to_iso(),
    )
