"""
Location geofence operations: containing-location lookup, nearby search and
coordinate updates. All arguments are validated before the candidate fetch.
"""
import logging
import threading
from pathlib import Path

from src.data.locations_repo import (
    LocationRecord,
    bounding_box,
    get_candidates_with_coordinates,
    get_location_by_code,
    save_coordinates,
)
from src.geo.coordinates import clear_coordinates, set_coordinates, validate_coordinates, validate_query_point
from src.geo.errors import LocationNotFoundError
from src.geo.proximity import (
    DEFAULT_NEARBY_MAX_RESULTS,
    DEFAULT_NEARBY_RADIUS_M,
    MAX_NEARBY_RESULTS,
    LocationMatch,
    find_containing_location,
    find_nearby_locations,
    validate_nearby_arguments,
)
from src.monitoring.metrics import record_query

logger = logging.getLogger(__name__)


def by_coordinates(
    db_path: str | Path,
    product: str,
    latitude: float,
    longitude: float,
    cancel_event: threading.Event | None = None,
) -> LocationMatch | None:
    """Location of product whose geofence contains (latitude, longitude), or None."""
    point = validate_query_point(latitude, longitude)
    candidates = get_candidates_with_coordinates(db_path, product)
    match = find_containing_location(point, candidates, cancel_event=cancel_event)
    record_query("containment_hit" if match else "containment_miss")
    logger.info(
        "telemetry op=by_coordinates product=%s candidates=%s found=%s",
        product,
        len(candidates),
        match.location.location_code if match else None,
    )
    return match


def nearby(
    db_path: str | Path,
    product: str,
    latitude: float,
    longitude: float,
    radius_m: float | None = None,
    max_results: int | None = None,
    max_results_ceiling: int = MAX_NEARBY_RESULTS,
    cancel_event: threading.Event | None = None,
) -> list[LocationMatch]:
    """
    Locations of product within radius_m of the point, nearest first, at most max_results.
    Omitted radius_m / max_results default to 5000 m / 10.
    """
    if radius_m is None:
        radius_m = DEFAULT_NEARBY_RADIUS_M
    if max_results is None:
        max_results = DEFAULT_NEARBY_MAX_RESULTS
    point = validate_query_point(latitude, longitude)
    validate_nearby_arguments(radius_m, max_results, max_results_ceiling)
    candidates = get_candidates_with_coordinates(
        db_path, product, bbox=bounding_box(point.latitude, point.longitude, radius_m)
    )
    matches = find_nearby_locations(
        point,
        radius_m,
        max_results,
        candidates,
        cancel_event=cancel_event,
        max_results_ceiling=max_results_ceiling,
    )
    record_query("nearby")
    logger.info(
        "telemetry op=nearby product=%s radius_m=%s max_results=%s candidates=%s returned=%s",
        product,
        radius_m,
        max_results,
        len(candidates),
        len(matches),
    )
    return matches


def update_coordinates(
    db_path: str | Path,
    product: str,
    location_code: str,
    latitude: float,
    longitude: float,
    geofence_radius: float | None = None,
) -> LocationRecord:
    """Replace latitude, longitude and geofence radius of a location together."""
    validate_query_point(latitude, longitude)
    validate_coordinates(latitude, longitude, geofence_radius)
    record = get_location_by_code(db_path, product, location_code)
    if record is None:
        raise LocationNotFoundError(location_code)
    updated = set_coordinates(record, latitude, longitude, geofence_radius)
    saved = save_coordinates(db_path, updated)
    logger.info(
        "telemetry op=update_coordinates product=%s location_code=%s geofence=%s",
        product,
        location_code,
        saved.coordinate.has_geofence,
    )
    return saved


def clear_location_coordinates(db_path: str | Path, product: str, location_code: str) -> LocationRecord:
    record = get_location_by_code(db_path, product, location_code)
    if record is None:
        raise LocationNotFoundError(location_code)
    saved = save_coordinates(db_path, clear_coordinates(record))
    logger.info("telemetry op=clear_coordinates product=%s location_code=%s", product, location_code)
    return saved
