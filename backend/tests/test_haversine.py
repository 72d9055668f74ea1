"""Tests for Haversine distance helper."""
import math

import pytest

from src.geo.coordinates import GeoPoint
from src.geo.distance import EARTH_RADIUS_M, distance_between, haversine_distance_m
from src.geo.errors import InvalidCoordinateError


def test_same_point_zero_distance():
    assert haversine_distance_m(40.0, -88.0, 40.0, -88.0) == 0.0
    assert haversine_distance_m(34.01003, -84.385296, 34.01003, -84.385296) == 0.0


def test_antipodal_roughly_half_circumference():
    d = haversine_distance_m(0.0, 0.0, 0.0, 180.0)
    assert abs(d - math.pi * EARTH_RADIUS_M) < 1.0


def test_one_degree_latitude():
    # 1 deg of latitude on a 6371 km sphere ~ 111195 m
    d = haversine_distance_m(0.0, 0.0, 1.0, 0.0)
    assert abs(d - 111_195) < 1.0


def test_known_distance_chicago():
    # ~454 m: 0.0038 deg north, 0.002 deg east at 41.88 N
    d = haversine_distance_m(41.8781, -87.6298, 41.8819, -87.6278)
    assert 440 < d < 470


@pytest.mark.parametrize(
    "a,b",
    [
        ((40.1, -88.2), (40.2, -88.1)),
        ((-33.8688, 151.2093), (51.5074, -0.1278)),
        ((89.9, 179.9), (-89.9, -179.9)),
        ((0.0, 0.0), (0.0, 180.0)),
    ],
)
def test_symmetry(a, b):
    d1 = haversine_distance_m(a[0], a[1], b[0], b[1])
    d2 = haversine_distance_m(b[0], b[1], a[0], a[1])
    assert abs(d1 - d2) < 1e-9


def test_distance_between_validates_points():
    assert distance_between(GeoPoint(10.0, 10.0), GeoPoint(10.0, 10.0)) == 0.0
    with pytest.raises(InvalidCoordinateError):
        distance_between(GeoPoint(91.0, 0.0), GeoPoint(0.0, 0.0))
    with pytest.raises(InvalidCoordinateError):
        distance_between(GeoPoint(0.0, 0.0), GeoPoint(0.0, -180.5))
