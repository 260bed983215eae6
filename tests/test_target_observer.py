from __future__ import annotations

import math

import numpy as np
import pytest

from flare import BelowHorizon, InvalidCoordinate, Observer, Target, Time
from flare.spatial import HorizontalPosition, airmass


def _angle_difference(a: float, b: float) -> float:
    return abs((a - b + 180.0) % 360.0 - 180.0)


@pytest.fixture
def observer() -> Observer:
    return Observer(30.0, 45.0, 1800.0, "A")


@pytest.fixture
def instant() -> Time:
    return Time(2020, 12, 21, 12, 0, 0)


def test_target_ra_is_wrapped():
    assert Target(-10.0, 0.0).ra == pytest.approx(350.0)
    assert Target(370.0, 0.0).ra == pytest.approx(10.0)
    assert Target(360.0, 5.0).ra == 0.0


@pytest.mark.parametrize("ra, dec", [(0.0, 91.0), (0.0, -90.5), (0.0, float("nan")), (float("inf"), 0.0)])
def test_target_rejects_invalid_coordinates(ra: float, dec: float):
    with pytest.raises(InvalidCoordinate):
        Target(ra, dec)


@pytest.mark.parametrize(
    "lat, lon",
    [(91.0, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0), (float("nan"), 0.0)],
)
def test_observer_rejects_invalid_location(lat: float, lon: float):
    with pytest.raises(InvalidCoordinate):
        Observer(lat, lon)


def test_observer_accepts_negative_elevation():
    dead_sea = Observer(31.5, 35.5, -430.0)
    assert dead_sea.elevation == -430.0
    assert dead_sea.horizon_dip() == 0.0


def test_string_forms():
    assert str(Target(6.374817, 20.242942, "B")) == "Name: B, RA: 6.374817, DEC: 20.242942"
    assert str(Target(6.374817, 20.242942)) == "RA: 6.374817, DEC: 20.242942 (no name)"
    assert str(Observer(30.0, 45.0, 1800.0, "A")) == "Name: A, Lat: 30.0, Lon: 45.0, Elevation: 1800.0"
    assert str(Observer(30.0, 45.0)) == "Lat: 30.0, Lon: 45.0, Elevation: 0.0 (no name)"


def test_separation_between_targets():
    first = Target(6.374817, 20.242942, "A")
    second = Target(6.374817, 21.242942, "B")
    assert first.separation(second) == pytest.approx(1.0)
    assert first.separation(first) == 0.0
    separations = first.separations([first, second])
    assert isinstance(separations, np.ndarray)
    assert separations == pytest.approx([0.0, 1.0])


def test_target_on_meridian_at_observer_latitude_is_at_zenith(observer: Observer, instant: Time):
    lst = observer.local_sidereal_time(instant)
    target = Target(lst, observer.lat)
    assert target.hour_angle(observer, instant) == pytest.approx(0.0, abs=1e-9)
    assert target.altitude(observer, instant) == pytest.approx(90.0, abs=1e-5)
    assert target.airmass(observer, instant) == pytest.approx(1.0, abs=1e-6)


def test_meridian_azimuths(observer: Observer, instant: Time):
    lst = observer.local_sidereal_time(instant)
    south = Target(lst, 0.0).horizontal(observer, instant)
    assert isinstance(south, HorizontalPosition)
    assert south.alt == pytest.approx(60.0, abs=1e-9)
    assert south.az == pytest.approx(180.0, abs=1e-9)

    north = Target(lst, 60.0).horizontal(observer, instant)
    assert north.alt == pytest.approx(60.0, abs=1e-9)
    assert _angle_difference(north.az, 0.0) < 1e-9


def test_rising_target_is_in_the_east(observer: Observer, instant: Time):
    lst = observer.local_sidereal_time(instant)
    position = Target(lst + 90.0, 0.0).horizontal(observer, instant)
    assert position.alt == pytest.approx(0.0, abs=1e-9)
    assert position.az == pytest.approx(90.0, abs=1e-9)


def test_apparent_altitude_is_raised_by_refraction(observer: Observer, instant: Time):
    lst = observer.local_sidereal_time(instant)
    target = Target(lst, -40.0)
    true_alt = target.altitude(observer, instant)
    assert target.altitude(observer, instant, apparent=True) > true_alt


def test_airmass_example(observer: Observer, instant: Time):
    target = Target(6.374817, 20.242942, "B")
    alt = target.altitude(observer, instant)
    assert alt == pytest.approx(43.3, abs=0.3)
    value = target.airmass(observer, instant)
    assert value == pytest.approx(airmass(alt))
    assert 1.3 < value < 1.6


def test_airmass_below_horizon_is_reported(instant: Time):
    northern = Observer(60.0, 10.0)
    southern_target = Target(100.0, -80.0)
    with pytest.raises(BelowHorizon):
        southern_target.airmass(northern, instant)


def test_targets_airmasses_grid(observer: Observer):
    targets = [Target(6.374817, 20.242942), Target(100.0, 85.0), Target(0.0, -85.0)]
    times = [Time(2020, 12, 21, hour) for hour in (0, 6, 12, 18)]
    grid = observer.targets_airmasses(targets, times)
    assert grid.shape == (3, 4)
    for i, target in enumerate(targets):
        for j, time in enumerate(times):
            if target.altitude(observer, time) > 0.0:
                assert grid[i, j] == pytest.approx(target.airmass(observer, time), rel=1e-9)
            else:
                assert np.isinf(grid[i, j])
    assert np.all(np.isinf(grid[2]))
    assert np.all(np.isfinite(grid[1]))


def test_hmsdms_and_galactic():
    target = Target(6.374817, 20.242942)
    assert target.to_hmsdms() == ("00:25:29.9561", "+20:14:34.591")
    l, b = target.to_galactic()
    assert 0.0 <= l < 360.0
    assert -90.0 <= b <= 90.0


def test_sun_altaz_at_local_noon_on_equinox():
    equator = Observer(0.0, 0.0)
    noon = Time(2024, 3, 20, 12, 7, 0)
    position = equator.sun_altaz(noon)
    assert position.alt > 89.0
    assert not math.isnan(position.az)
