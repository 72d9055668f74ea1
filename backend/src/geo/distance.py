"""
Haversine distance for geofence containment and nearby queries.
"""
import math

from src.geo.coordinates import GeoPoint, validate_query_point

# Mean Earth radius in meters (spherical approximation, no ellipsoidal correction)
EARTH_RADIUS_M = 6_371_000.0


def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Return great-circle distance between two points in meters.
    Arguments in degrees.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    # Rounding can push a a hair past 1.0 for near-antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """
    Range-checked form of haversine_distance_m for callers holding unvalidated points.
    The proximity executor validates its query point once up front and calls
    haversine_distance_m directly.
    """
    validate_query_point(a.latitude, a.longitude)
    validate_query_point(b.latitude, b.longitude)
    return haversine_distance_m(a.latitude, a.longitude, b.latitude, b.longitude)
