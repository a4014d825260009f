"""Tests for coordinate helpers."""

import math

import pytest

from relief_sources.data import Coordinates
from relief_sources.geo import (
    haversine_miles,
    is_valid_coordinate,
    miles_to_meters,
    round_half_up,
)


def test_one_degree_latitude_is_about_69_miles() -> None:
    distance = haversine_miles(Coordinates(lat=30.0, lng=-99.0), Coordinates(lat=31.0, lng=-99.0))
    assert distance == pytest.approx(69.0, rel=0.01)


def test_same_point_is_zero() -> None:
    point = Coordinates(lat=30.05, lng=-99.14)
    assert haversine_miles(point, point) == 0.0


def test_distance_is_symmetric() -> None:
    a = Coordinates(lat=30.05, lng=-99.14)
    b = Coordinates(lat=29.42, lng=-98.49)
    assert haversine_miles(a, b) == pytest.approx(haversine_miles(b, a))


@pytest.mark.parametrize(
    ("lat", "lng", "expected"),
    [
        (30.0, -99.0, True),
        (90.0, 180.0, True),
        (-90.0, -180.0, True),
        (90.1, 0.0, False),
        (0.0, -180.5, False),
        (None, 0.0, False),
        (0.0, None, False),
        (math.nan, 0.0, False),
        (0.0, math.inf, False),
    ],
)
def test_is_valid_coordinate(lat: float | None, lng: float | None, expected: bool) -> None:
    assert is_valid_coordinate(lat, lng) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.5, 1), (1.5, 2), (2.5, 3), (-0.5, 0), (-1.5, -1), (30.49, 30), (-99.6, -100)],
)
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_miles_to_meters() -> None:
    assert miles_to_meters(30) == pytest.approx(48280.32)
