"""Tests for the coordinate value model: ranges, pairing, radius rules, atomic set/clear."""
import math

import pytest

from src.geo.coordinates import (
    LocationCoordinate,
    clear_coordinates,
    set_coordinates,
    validate_coordinates,
    validate_query_point,
)
from src.geo.errors import InvalidArgumentError, InvalidCoordinateError
from src.data.locations_repo import LocationRecord


def _record(**kwargs) -> LocationRecord:
    return LocationRecord(
        location_id="id-1",
        product="ProductA",
        location_code="LOC001",
        location_type_code="WAREHOUSE",
        address_line1="123 Main St",
        city="Chicago",
        state="IL",
        zip_code="60601",
        country="USA",
        **kwargs,
    )


@pytest.mark.parametrize("lat", [-90.0, 0.0, 90.0])
@pytest.mark.parametrize("lng", [-180.0, 0.0, 180.0])
def test_boundaries_are_valid(lat, lng):
    validate_coordinates(lat, lng)
    validate_query_point(lat, lng)


@pytest.mark.parametrize(
    "lat,lng",
    [(90.0001, 0.0), (-91.0, 0.0), (0.0, 180.0001), (0.0, -181.0), (math.nan, 0.0), (0.0, math.inf)],
)
def test_out_of_range_rejected(lat, lng):
    with pytest.raises(InvalidCoordinateError):
        validate_coordinates(lat, lng)
    with pytest.raises(InvalidCoordinateError):
        validate_query_point(lat, lng)
    with pytest.raises(InvalidCoordinateError):
        set_coordinates(_record(), lat, lng)


def test_error_messages_name_the_field():
    with pytest.raises(InvalidCoordinateError, match="Latitude must be between -90 and 90"):
        validate_coordinates(91.0, -87.6298)
    with pytest.raises(InvalidCoordinateError, match="Longitude must be between -180 and 180"):
        validate_coordinates(41.8781, 181.0)


@pytest.mark.parametrize("lat,lng", [(41.8781, None), (None, -87.6298)])
def test_only_one_of_pair_rejected(lat, lng):
    with pytest.raises(InvalidCoordinateError):
        validate_coordinates(lat, lng)
    with pytest.raises(InvalidCoordinateError):
        LocationCoordinate.create(lat, lng)
    with pytest.raises(InvalidCoordinateError):
        set_coordinates(_record(), lat, lng)
    with pytest.raises(InvalidCoordinateError):
        validate_query_point(lat, lng)


@pytest.mark.parametrize("radius", [0.0, -50.0, math.nan])
def test_non_positive_radius_rejected(radius):
    with pytest.raises(InvalidArgumentError, match="greater than 0"):
        validate_coordinates(41.8781, -87.6298, radius)


def test_radius_without_coordinates_rejected():
    with pytest.raises(InvalidCoordinateError, match="only be specified when coordinates"):
        validate_coordinates(None, None, 100.0)


def test_no_coordinates_is_valid():
    validate_coordinates(None, None)
    coord = LocationCoordinate.create(None, None)
    assert not coord.has_coordinates
    assert not coord.has_geofence
    assert coord.point is None


def test_set_coordinates_replaces_all_fields():
    rec = set_coordinates(_record(), 41.8781, -87.6298, 100.0)
    assert rec.coordinate.latitude == 41.8781
    assert rec.coordinate.longitude == -87.6298
    assert rec.coordinate.geofence_radius == 100.0
    assert rec.coordinate.has_coordinates
    assert rec.coordinate.has_geofence


def test_set_coordinates_without_radius_drops_previous_radius():
    rec = set_coordinates(_record(), 41.8781, -87.6298, 100.0)
    rec = set_coordinates(rec, 41.9, -87.7)
    assert rec.coordinate.has_coordinates
    assert rec.coordinate.geofence_radius is None
    assert not rec.coordinate.has_geofence


def test_failed_set_leaves_record_untouched():
    original = set_coordinates(_record(), 41.8781, -87.6298, 100.0)
    with pytest.raises(InvalidArgumentError):
        set_coordinates(original, 42.0, -88.0, -5.0)
    assert original.coordinate == LocationCoordinate(41.8781, -87.6298, 100.0)


def test_clear_coordinates_removes_all_coordinate_data():
    rec = clear_coordinates(set_coordinates(_record(), 41.8781, -87.6298, 100.0))
    assert rec.coordinate.latitude is None
    assert rec.coordinate.longitude is None
    assert rec.coordinate.geofence_radius is None
    assert not rec.coordinate.has_coordinates
    assert not rec.coordinate.has_geofence


def test_coordinates_keep_eight_fractional_digits():
    coord = LocationCoordinate.create(34.0100300049, -84.3852960049)
    assert coord.latitude == 34.01003
    assert coord.longitude == -84.385296
    coord = LocationCoordinate.create(12.34567891, -98.76543219)
    assert coord.latitude == 12.34567891
    assert coord.longitude == -98.76543219
