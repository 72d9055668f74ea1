"""
Coordinate value model: validated (latitude, longitude, geofence radius) tuples.

A location either has both latitude and longitude or neither. A geofence radius
(meters) is only allowed alongside coordinates and must be strictly positive.
Coordinates are never updated field by field: set_coordinates / clear_coordinates
build a new tuple and swap it into the record in one step.
"""
import math
from typing import NamedTuple, TypeVar

from src.geo.errors import InvalidArgumentError, InvalidCoordinateError

LAT_MIN, LAT_MAX = -90.0, 90.0
LNG_MIN, LNG_MAX = -180.0, 180.0

# Fractional digits kept for latitude/longitude through storage round-trips
COORDINATE_DECIMALS = 8


class GeoPoint(NamedTuple):
    latitude: float
    longitude: float


def _in_range(value: float, lo: float, hi: float) -> bool:
    return math.isfinite(value) and lo <= value <= hi


def _check_lat_lng(latitude: float, longitude: float) -> None:
    if not _in_range(latitude, LAT_MIN, LAT_MAX):
        raise InvalidCoordinateError(f"Latitude must be between {LAT_MIN:g} and {LAT_MAX:g} degrees.")
    if not _in_range(longitude, LNG_MIN, LNG_MAX):
        raise InvalidCoordinateError(f"Longitude must be between {LNG_MIN:g} and {LNG_MAX:g} degrees.")


def validate_coordinates(
    latitude: float | None,
    longitude: float | None,
    radius: float | None = None,
) -> None:
    """
    Raise if the tuple is not storable.

    InvalidCoordinateError: lat/lng out of range, only one of the pair given,
    or a radius given without coordinates.
    InvalidArgumentError: radius present and <= 0.
    """
    if (latitude is None) != (longitude is None):
        raise InvalidCoordinateError(
            "Both latitude and longitude must be provided together, or both must be null."
        )
    if latitude is None:
        if radius is not None:
            raise InvalidCoordinateError("Geofence radius can only be specified when coordinates are provided.")
        return
    _check_lat_lng(float(latitude), float(longitude))
    if radius is not None:
        radius = float(radius)
        if not (math.isfinite(radius) and radius > 0):
            raise InvalidArgumentError("Geofence radius must be greater than 0 when specified.")


def validate_query_point(latitude: float | None, longitude: float | None) -> GeoPoint:
    """Query points need both values; returns them as a GeoPoint."""
    if latitude is None or longitude is None:
        raise InvalidCoordinateError("Both latitude and longitude are required.")
    latitude, longitude = float(latitude), float(longitude)
    _check_lat_lng(latitude, longitude)
    return GeoPoint(latitude, longitude)


class LocationCoordinate(NamedTuple):
    latitude: float | None = None
    longitude: float | None = None
    geofence_radius: float | None = None

    @classmethod
    def create(
        cls,
        latitude: float | None,
        longitude: float | None,
        geofence_radius: float | None = None,
    ) -> "LocationCoordinate":
        validate_coordinates(latitude, longitude, geofence_radius)
        if latitude is None:
            return cls()
        return cls(
            latitude=round(float(latitude), COORDINATE_DECIMALS),
            longitude=round(float(longitude), COORDINATE_DECIMALS),
            geofence_radius=float(geofence_radius) if geofence_radius is not None else None,
        )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def has_geofence(self) -> bool:
        return self.has_coordinates and self.geofence_radius is not None and self.geofence_radius > 0

    @property
    def point(self) -> GeoPoint | None:
        if not self.has_coordinates:
            return None
        return GeoPoint(self.latitude, self.longitude)


EMPTY_COORDINATE = LocationCoordinate()

R = TypeVar("R")


def set_coordinates(record: R, latitude: float, longitude: float, radius: float | None = None) -> R:
    """Return a copy of record with all three coordinate fields replaced together."""
    if latitude is None or longitude is None:
        raise InvalidCoordinateError("Setting coordinates requires both latitude and longitude.")
    return record._replace(coordinate=LocationCoordinate.create(latitude, longitude, radius))


def clear_coordinates(record: R) -> R:
    """Return a copy of record with latitude, longitude and radius all cleared."""
    return record._replace(coordinate=EMPTY_COORDINATE)
