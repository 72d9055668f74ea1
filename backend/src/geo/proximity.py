"""
Proximity queries over a tenant-scoped candidate set.

The caller (see src.data.locations_repo.get_candidates_with_coordinates) is
responsible for handing in only the tenant's active, non-deleted rows. Both
queries are pure functions of their inputs and hold no shared state.
"""
import logging
import math
import threading
from collections.abc import Iterable
from typing import NamedTuple, Protocol

from src.geo.coordinates import GeoPoint, LocationCoordinate, validate_query_point
from src.geo.distance import haversine_distance_m
from src.geo.errors import InvalidArgumentError, QueryCancelledError

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_RADIUS_M = 5000.0
DEFAULT_NEARBY_MAX_RESULTS = 10
MAX_NEARBY_RESULTS = 100


class Candidate(Protocol):
    location_id: str
    location_code: str
    coordinate: LocationCoordinate


class LocationMatch(NamedTuple):
    location: Candidate
    distance_m: float


def _sort_key(match: LocationMatch) -> tuple[float, str, str]:
    # Exact distance ties fall back to identifiers so ordering is reproducible
    return (match.distance_m, match.location.location_code, match.location.location_id)


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise QueryCancelledError("Proximity query cancelled.")


def _measure(
    point: GeoPoint,
    candidates: Iterable[Candidate],
    cancel_event: threading.Event | None,
) -> list[LocationMatch]:
    out: list[LocationMatch] = []
    for candidate in candidates:
        _check_cancelled(cancel_event)
        coord = candidate.coordinate
        if not coord.has_coordinates:
            continue
        d = haversine_distance_m(point.latitude, point.longitude, coord.latitude, coord.longitude)
        out.append(LocationMatch(candidate, d))
    return out


def validate_nearby_arguments(radius_m: float, max_results: int, max_results_ceiling: int = MAX_NEARBY_RESULTS) -> None:
    if radius_m is None or not (math.isfinite(radius_m) and radius_m > 0):
        raise InvalidArgumentError("radius_meters must be a finite number greater than 0.")
    if max_results is None or max_results <= 0:
        raise InvalidArgumentError("max_results must be greater than 0.")
    if max_results > max_results_ceiling:
        raise InvalidArgumentError(f"max_results must not exceed {max_results_ceiling}.")


def find_containing_location(
    point: GeoPoint,
    candidates: Iterable[Candidate],
    cancel_event: threading.Event | None = None,
) -> LocationMatch | None:
    """
    Return the location whose geofence contains point, or None.

    A point on the boundary (distance == radius) is contained. When geofences
    overlap, the location whose centre is closest to the point wins.
    """
    point = validate_query_point(point.latitude, point.longitude)
    with_fence = (c for c in candidates if c.coordinate.has_geofence)
    containing = [
        m for m in _measure(point, with_fence, cancel_event)
        if m.distance_m <= m.location.coordinate.geofence_radius
    ]
    if not containing:
        return None
    if len(containing) > 1:
        logger.debug("telemetry overlapping_geofences count=%s", len(containing))
    return min(containing, key=_sort_key)


def find_nearby_locations(
    point: GeoPoint,
    radius_m: float,
    max_results: int,
    candidates: Iterable[Candidate],
    cancel_event: threading.Event | None = None,
    max_results_ceiling: int = MAX_NEARBY_RESULTS,
) -> list[LocationMatch]:
    """
    Return up to max_results locations within radius_m of point, nearest first.

    The caller-supplied radius is used; each location's own geofence radius is
    ignored here.
    """
    point = validate_query_point(point.latitude, point.longitude)
    validate_nearby_arguments(radius_m, max_results, max_results_ceiling)
    within = [m for m in _measure(point, candidates, cancel_event) if m.distance_m <= radius_m]
    within.sort(key=_sort_key)
    return within[:max_results]
