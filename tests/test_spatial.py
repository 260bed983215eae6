from __future__ import annotations

import math

import numpy as np
import pytest

from flare.errors import BelowHorizon, InvalidCoordinate
from flare.spatial import (
    airmass,
    airmass_array,
    deg2dms,
    deg2hms,
    great_circle_distance,
    horizon_dip,
    in_ellipse,
    normalize_degrees,
    normalize_hour_angle,
    radec2lb,
    refraction,
)

PAIRS = [
    ((6.374817, 20.242942), (6.374817, 21.242942)),
    ((0.0, 0.0), (90.0, 0.0)),
    ((10.0, -45.0), (350.0, 45.0)),
    ((123.4, 89.0), (303.4, 89.0)),
    ((200.0, -10.0), (20.0, 10.0)),
]


def test_separation_of_identical_positions_is_zero():
    assert great_circle_distance(123.4, -56.7, 123.4, -56.7) == 0.0
    assert great_circle_distance(0.0, 90.0, 45.0, 90.0) == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("first, second", PAIRS)
def test_separation_is_symmetric_and_bounded(first, second):
    forward = great_circle_distance(*first, *second)
    backward = great_circle_distance(*second, *first)
    assert forward == pytest.approx(backward, abs=1e-12)
    assert 0.0 <= forward <= 180.0


def test_separation_known_values():
    assert great_circle_distance(6.374817, 20.242942, 6.374817, 21.242942) == pytest.approx(1.0)
    assert great_circle_distance(0.0, 0.0, 90.0, 0.0) == pytest.approx(90.0)
    assert great_circle_distance(0.0, 0.0, 180.0, 0.0) == pytest.approx(180.0)
    assert great_circle_distance(123.4, 89.0, 303.4, 89.0) == pytest.approx(2.0)


def test_tiny_separation_keeps_precision():
    separation = great_circle_distance(10.0, 10.0, 10.0 + 1e-7, 10.0)
    assert not math.isnan(separation)
    assert separation == pytest.approx(1e-7 * math.cos(math.radians(10.0)), rel=1e-6)


def test_normalization_helpers():
    assert normalize_degrees(370.0) == pytest.approx(10.0)
    assert normalize_degrees(-10.0) == pytest.approx(350.0)
    assert normalize_degrees(-1e-20) == 0.0
    assert normalize_hour_angle(180.0) == 180.0
    assert normalize_hour_angle(-180.0) == 180.0
    assert normalize_hour_angle(190.0) == pytest.approx(-170.0)
    assert normalize_hour_angle(540.0) == pytest.approx(180.0)
    assert normalize_hour_angle(-90.0) == pytest.approx(-90.0)


def test_airmass_at_zenith_is_one():
    assert airmass(90.0) == pytest.approx(1.0, abs=1e-6)


def test_airmass_increases_towards_horizon():
    altitudes = [90.0, 75.0, 60.0, 45.0, 30.0, 20.0, 10.0, 5.0, 2.0, 1.0, 0.5, 0.1]
    values = [airmass(alt) for alt in altitudes]
    assert all(later > earlier for earlier, later in zip(values, values[1:]))
    assert airmass(30.0) == pytest.approx(2.0, abs=0.01)
    assert math.isfinite(values[-1]) and values[-1] > 30.0


def test_airmass_strictly_increasing_just_below_zenith():
    altitudes = [90.0 - i * 0.001 for i in range(201)]
    values = [airmass(alt) for alt in altitudes]
    assert values[0] == 1.0
    assert all(later > earlier for earlier, later in zip(values, values[1:]))
    np.testing.assert_allclose(airmass_array(np.array(altitudes)), values, rtol=1e-12)


def test_airmass_tends_to_plain_secant_at_high_altitude():
    for alt in (60.0, 75.0, 85.0):
        secant = 1.0 / math.sin(math.radians(alt))
        assert airmass(alt) < secant
        assert airmass(alt) == pytest.approx(secant, rel=2e-3)


@pytest.mark.parametrize("alt", [0.0, -0.001, -5.0, -90.0])
def test_airmass_below_horizon(alt: float):
    with pytest.raises(BelowHorizon) as excinfo:
        airmass(alt)
    assert excinfo.value.altitude == alt


def test_airmass_array_marks_invisible_cells():
    values = airmass_array(np.array([90.0, 30.0, 0.0, -10.0]))
    assert values[0] == pytest.approx(1.0, abs=1e-6)
    assert values[1] == pytest.approx(airmass(30.0))
    assert np.isinf(values[2]) and np.isinf(values[3])


def test_refraction():
    assert refraction(0.0) == pytest.approx(0.483, abs=0.01)
    assert abs(refraction(90.0)) < 1e-3
    assert refraction(-2.0) == 0.0
    assert refraction(10.0, pressure_hpa=505.0) == pytest.approx(refraction(10.0) / 2.0)


def test_horizon_dip():
    assert horizon_dip(0.0) == 0.0
    assert horizon_dip(-30.0) == 0.0
    assert horizon_dip(1000.0) == pytest.approx(1.0146, rel=1e-3)


def test_sexagesimal_formatting():
    assert deg2hms(6.374817) == "00:25:29.9561"
    assert deg2hms(180.0) == "12:00:00.0000"
    assert deg2dms(20.242942) == "+20:14:34.591"
    assert deg2dms(-0.5) == "-00:30:00.000"


def test_sexagesimal_formatting_rejects_out_of_range():
    with pytest.raises(InvalidCoordinate):
        deg2hms(360.0)
    with pytest.raises(InvalidCoordinate):
        deg2hms(-1.0)
    with pytest.raises(InvalidCoordinate):
        deg2dms(91.0)


def test_galactic_coordinates():
    l_center, b_center = radec2lb(266.40499, -28.93617)
    assert min(l_center, 360.0 - l_center) < 0.01
    assert b_center == pytest.approx(0.0, abs=0.01)

    _, b_pole = radec2lb(192.85948, 27.12825)
    assert b_pole == pytest.approx(90.0, abs=0.01)


def test_in_ellipse():
    semi_major = 1.0
    assert in_ellipse(150.0, 0.0, 150.0, 0.0, semi_major, 0.5, 0.0)
    assert in_ellipse(150.0, 0.9, 150.0, 0.0, semi_major, 0.5, 0.0)
    assert not in_ellipse(150.0, 1.1, 150.0, 0.0, semi_major, 0.5, 0.0)
    assert not in_ellipse(150.6, 0.0, 150.0, 0.0, semi_major, 0.5, 0.0)
    assert in_ellipse(150.6, 0.0, 150.0, 0.0, semi_major, 0.5, 90.0)
    assert not in_ellipse(330.0, 0.0, 150.0, 0.0, semi_major, 0.5, 0.0)


def test_in_ellipse_rejects_bad_shapes():
    with pytest.raises(InvalidCoordinate):
        in_ellipse(0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    with pytest.raises(InvalidCoordinate):
        in_ellipse(0.0, 0.0, 0.0, 0.0, 0.0, 0.5, 0.0)
