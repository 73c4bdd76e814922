"""Tests for the geo primitives."""

import math

import pytest

from ferrywatch.models.vessel import Terminal
from ferrywatch.prediction.geo import (
    bearing_degrees,
    distance_to_terminal,
    estimate_arrival_minutes,
    estimate_drive_minutes,
    haversine_distance_km,
    interpolate,
    is_near_terminal,
)

POINTS = [
    (35.989, 14.329),
    (36.025, 14.299),
    (0.0, 0.0),
    (-33.86, 151.21),
    (51.5, -0.12),
]


@pytest.mark.parametrize("lat,lon", POINTS)
def test_distance_to_same_point_is_zero(lat, lon):
    assert haversine_distance_km(lat, lon, lat, lon) == 0


def test_distance_is_symmetric():
    for lat1, lon1 in POINTS:
        for lat2, lon2 in POINTS:
            forward = haversine_distance_km(lat1, lon1, lat2, lon2)
            backward = haversine_distance_km(lat2, lon2, lat1, lon1)
            assert forward == pytest.approx(backward)


def test_distance_between_terminals():
    # Ċirkewwa to Mġarr is a little under 5 km as the crow flies
    assert haversine_distance_km(35.989, 14.329, 36.025, 14.299) == pytest.approx(4.83, abs=0.1)


def test_one_degree_of_latitude():
    assert haversine_distance_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)


def test_bearing_cardinal_directions():
    assert bearing_degrees(0, 0, 1, 0) == pytest.approx(0)
    assert bearing_degrees(0, 0, 0, 1) == pytest.approx(90)
    assert bearing_degrees(1, 0, 0, 0) == pytest.approx(180)
    assert bearing_degrees(0, 1, 0, 0) == pytest.approx(270)


def test_bearing_is_normalised():
    for lat1, lon1 in POINTS:
        for lat2, lon2 in POINTS:
            assert 0 <= bearing_degrees(lat1, lon1, lat2, lon2) < 360


def test_bearing_from_mgarr_to_cirkewwa_is_south_east():
    assert 90 <= bearing_degrees(36.025, 14.299, 35.989, 14.329) <= 180


@pytest.mark.parametrize("speed", [0, -5, -100])
def test_no_eta_without_forward_speed(speed):
    assert math.isinf(estimate_arrival_minutes(3.0, speed))


def test_eta_at_ten_knots():
    # 10 knots = 18.52 km/h
    assert estimate_arrival_minutes(18.52, 100) == pytest.approx(60)


def test_eta_decreases_with_speed():
    etas = [estimate_arrival_minutes(5.0, speed) for speed in (5, 10, 50, 100, 200)]
    assert etas == sorted(etas, reverse=True)
    assert len(set(etas)) == len(etas)


def test_eta_never_negative():
    assert estimate_arrival_minutes(0, 100) == 0


def test_distance_to_terminal_and_proximity():
    assert distance_to_terminal(35.989, 14.329, Terminal.CIRKEWWA) == 0
    assert is_near_terminal(35.990, 14.329, Terminal.CIRKEWWA)
    assert not is_near_terminal(35.990, 14.329, Terminal.MGARR)


def test_drive_time_estimate():
    # ~10 km straight line, x1.3 winding at 40 km/h
    lat = 35.989 + 0.09
    assert estimate_drive_minutes(lat, 14.329, Terminal.CIRKEWWA) == pytest.approx(19.5, rel=0.01)
    assert estimate_drive_minutes(35.989, 14.329, Terminal.CIRKEWWA) == 0


def test_interpolate():
    assert interpolate((0, 0), (10, 20), 0.5) == (5, 10)
    assert interpolate((1, 1), (2, 2), 0) == (1, 1)
