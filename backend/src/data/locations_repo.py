"""
Locations table in SQLite: tenant-scoped storage and candidate fetch for geofence queries.

Every read is scoped to one product (tenant). Candidate fetches additionally
drop inactive, soft-deleted and coordinate-less rows before anything reaches
the proximity executor.
"""
import math
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple

from src.geo.coordinates import COORDINATE_DECIMALS, LocationCoordinate
from src.geo.errors import (
    InvalidArgumentError,
    LocationAlreadyActiveError,
    LocationAlreadyExistsError,
    LocationAlreadyInactiveError,
    LocationNotFoundError,
)

LOCATION_CODE_MAX_LEN = 50
LOCATION_CODE_MIN_SEARCH_LEN = 2
LOCATION_TYPE_CODE_MAX_LEN = 20
LOCATION_TYPE_NAME_MAX_LEN = 100
ADDRESS_LINE_MAX_LEN = 200
CITY_MAX_LEN = 100
STATE_MAX_LEN = 50
ZIP_CODE_MAX_LEN = 20
COUNTRY_MAX_LEN = 50

_COLUMNS = """
    location_id, product, location_code, location_type_code, location_type_name,
    address_line1, address_line2, city, state, zip_code, country,
    is_active, is_deleted, latitude, longitude, geofence_radius, created_at, updated_at
"""


class LocationRecord(NamedTuple):
    location_id: str
    product: str
    location_code: str
    location_type_code: str
    address_line1: str
    city: str
    state: str
    zip_code: str
    country: str
    address_line2: str | None = None
    location_type_name: str | None = None
    is_active: bool = True
    is_deleted: bool = False
    coordinate: LocationCoordinate = LocationCoordinate()
    created_at: str | None = None
    updated_at: str | None = None


class BoundingBox(NamedTuple):
    lat_lo: float
    lat_hi: float
    lng_lo: float
    lng_hi: float


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def bounding_box(lat: float, lng: float, radius_m: float) -> BoundingBox | None:
    """
    Approximate lat/lng box enclosing a radius_m circle around (lat, lng).
    Returns None where the box would reach a pole or cross the antimeridian;
    callers then scan the full candidate set.
    """
    # 1 deg lat ~ 111 km; 1 deg lng ~ 111 * cos(lat) km. 10% slack keeps the box conservative.
    km = radius_m / 1000.0 * 1.1
    dlat = km / 111.0
    edge_lat = abs(lat) + dlat
    if edge_lat >= 90.0:
        return None
    dlng = km / (111.0 * math.cos(math.radians(edge_lat)))
    if lng - dlng < -180.0 or lng + dlng > 180.0:
        return None
    return BoundingBox(lat - dlat, lat + dlat, lng - dlng, lng + dlng)


def _row_to_record(r: sqlite3.Row) -> LocationRecord:
    if r["latitude"] is not None and r["longitude"] is not None:
        coordinate = LocationCoordinate(
            latitude=round(r["latitude"], COORDINATE_DECIMALS),
            longitude=round(r["longitude"], COORDINATE_DECIMALS),
            geofence_radius=r["geofence_radius"],
        )
    else:
        coordinate = LocationCoordinate()
    return LocationRecord(
        location_id=r["location_id"],
        product=r["product"],
        location_code=r["location_code"],
        location_type_code=r["location_type_code"],
        location_type_name=r["location_type_name"],
        address_line1=r["address_line1"],
        address_line2=r["address_line2"],
        city=r["city"],
        state=r["state"],
        zip_code=r["zip_code"],
        country=r["country"],
        is_active=bool(r["is_active"]),
        is_deleted=bool(r["is_deleted"]),
        coordinate=coordinate,
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


def _connect(db_path: str | Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str | Path) -> None:
    """Create locations table and indexes if they do not exist."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS locations (
                location_id TEXT PRIMARY KEY,
                product TEXT NOT NULL,
                location_code TEXT NOT NULL,
                location_type_code TEXT NOT NULL,
                location_type_name TEXT,
                address_line1 TEXT NOT NULL,
                address_line2 TEXT,
                city TEXT NOT NULL,
                state TEXT NOT NULL,
                zip_code TEXT NOT NULL,
                country TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                is_deleted INTEGER NOT NULL DEFAULT 0,
                latitude REAL,
                longitude REAL,
                geofence_radius REAL,
                created_at TEXT NOT NULL,
                updated_at TEXT,
                deleted_at TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS ux_locations_product_code
            ON locations(product, location_code) WHERE is_deleted = 0
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_locations_product_lat_lng ON locations(product, latitude, longitude)"
        )
        conn.commit()


def _require(value: str | None, field: str, max_len: int) -> str:
    v = (value or "").strip()
    if not v:
        raise InvalidArgumentError(f"{field} cannot be empty.")
    if len(v) > max_len:
        raise InvalidArgumentError(f"{field} cannot exceed {max_len} characters.")
    return v


def _optional(value: str | None, field: str, max_len: int) -> str | None:
    v = (value or "").strip()
    if not v:
        return None
    if len(v) > max_len:
        raise InvalidArgumentError(f"{field} cannot exceed {max_len} characters.")
    return v


def register_location(
    db_path: str | Path,
    *,
    product: str,
    location_code: str,
    location_type_code: str,
    address_line1: str,
    city: str,
    state: str,
    zip_code: str,
    country: str,
    address_line2: str | None = None,
    location_type_name: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    geofence_radius: float | None = None,
    is_active: bool = True,
    location_id: str | None = None,
) -> LocationRecord:
    """Insert a location for product. Coordinates are optional but validated as a tuple."""
    record = LocationRecord(
        location_id=location_id or str(uuid.uuid4()),
        product=_require(product, "Product", 50),
        location_code=_require(location_code, "Location code", LOCATION_CODE_MAX_LEN),
        location_type_code=_require(location_type_code, "Location type code", LOCATION_TYPE_CODE_MAX_LEN),
        location_type_name=_optional(location_type_name, "Location type name", LOCATION_TYPE_NAME_MAX_LEN),
        address_line1=_require(address_line1, "Address line 1", ADDRESS_LINE_MAX_LEN),
        address_line2=_optional(address_line2, "Address line 2", ADDRESS_LINE_MAX_LEN),
        city=_require(city, "City", CITY_MAX_LEN),
        state=_require(state, "State", STATE_MAX_LEN),
        zip_code=_require(zip_code, "Zip code", ZIP_CODE_MAX_LEN),
        country=_require(country, "Country", COUNTRY_MAX_LEN),
        is_active=is_active,
        coordinate=LocationCoordinate.create(latitude, longitude, geofence_radius),
        created_at=_now_iso(),
    )
    coord = record.coordinate
    with _connect(db_path) as conn:
        try:
            conn.execute(
                f"""
                INSERT INTO locations ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?, ?, ?, NULL)
                """,
                (
                    record.location_id, record.product, record.location_code,
                    record.location_type_code, record.location_type_name,
                    record.address_line1, record.address_line2, record.city,
                    record.state, record.zip_code, record.country,
                    int(record.is_active),
                    coord.latitude, coord.longitude, coord.geofence_radius,
                    record.created_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            raise LocationAlreadyExistsError(record.location_code) from e
        conn.commit()
    return record


def get_location_by_code(db_path: str | Path, product: str, location_code: str) -> LocationRecord | None:
    """Non-deleted location with this code in product (active or not)."""
    db_path = Path(db_path)
    if not db_path.exists():
        return None
    with _connect(db_path) as conn:
        r = conn.execute(
            f"""
            SELECT {_COLUMNS} FROM locations
            WHERE product = ? AND location_code = ? AND is_deleted = 0
            """,
            (product, location_code),
        ).fetchone()
    return _row_to_record(r) if r is not None else None


def list_locations(
    db_path: str | Path,
    product: str,
    code_prefix: str | None = None,
) -> list[LocationRecord]:
    """Non-deleted locations in product, optionally filtered by code prefix, ordered by code."""
    db_path = Path(db_path)
    prefix = (code_prefix or "").strip()
    if prefix and len(prefix) < LOCATION_CODE_MIN_SEARCH_LEN:
        raise InvalidArgumentError(
            f"Location code search requires minimum {LOCATION_CODE_MIN_SEARCH_LEN} characters."
        )
    if not db_path.exists():
        return []
    sql = f"SELECT {_COLUMNS} FROM locations WHERE product = ? AND is_deleted = 0"
    params: list = [product]
    if prefix:
        # substr() avoids LIKE wildcard handling of '%' and '_' in codes
        sql += " AND substr(location_code, 1, ?) = ?"
        params += [len(prefix), prefix]
    sql += " ORDER BY location_code"
    with _connect(db_path) as conn:
        return [_row_to_record(r) for r in conn.execute(sql, params).fetchall()]


def get_candidates_with_coordinates(
    db_path: str | Path,
    product: str,
    bbox: BoundingBox | None = None,
) -> list[LocationRecord]:
    """
    Candidate set for proximity queries: active, non-deleted, coordinate-bearing
    locations of product. bbox narrows the scan on the (product, lat, lng) index.
    """
    db_path = Path(db_path)
    if not db_path.exists():
        return []
    sql = f"""
        SELECT {_COLUMNS} FROM locations
        WHERE product = ? AND is_active = 1 AND is_deleted = 0
          AND latitude IS NOT NULL AND longitude IS NOT NULL
    """
    params: list = [product]
    if bbox is not None:
        sql += " AND latitude BETWEEN ? AND ? AND longitude BETWEEN ? AND ?"
        params += [bbox.lat_lo, bbox.lat_hi, bbox.lng_lo, bbox.lng_hi]
    with _connect(db_path) as conn:
        return [_row_to_record(r) for r in conn.execute(sql, params).fetchall()]


def save_coordinates(db_path: str | Path, record: LocationRecord) -> LocationRecord:
    """Persist latitude, longitude and radius of record in one statement."""
    coord = record.coordinate
    updated_at = _now_iso()
    with _connect(db_path) as conn:
        cur = conn.execute(
            """
            UPDATE locations
            SET latitude = ?, longitude = ?, geofence_radius = ?, updated_at = ?
            WHERE location_id = ? AND product = ? AND is_deleted = 0
            """,
            (coord.latitude, coord.longitude, coord.geofence_radius, updated_at,
             record.location_id, record.product),
        )
        conn.commit()
    if cur.rowcount == 0:
        raise LocationNotFoundError(record.location_code)
    return record._replace(updated_at=updated_at)


def set_active(db_path: str | Path, product: str, location_code: str, active: bool) -> LocationRecord:
    record = get_location_by_code(db_path, product, location_code)
    if record is None:
        raise LocationNotFoundError(location_code)
    if active and record.is_active:
        raise LocationAlreadyActiveError(location_code)
    if not active and not record.is_active:
        raise LocationAlreadyInactiveError(location_code)
    updated_at = _now_iso()
    with _connect(db_path) as conn:
        conn.execute(
            "UPDATE locations SET is_active = ?, updated_at = ? WHERE location_id = ?",
            (int(active), updated_at, record.location_id),
        )
        conn.commit()
    return record._replace(is_active=active, updated_at=updated_at)


def soft_delete_location(db_path: str | Path, product: str, location_code: str) -> LocationRecord:
    """Mark a location deleted; it disappears from every read in this module."""
    record = get_location_by_code(db_path, product, location_code)
    if record is None:
        raise LocationNotFoundError(location_code)
    now = _now_iso()
    with _connect(db_path) as conn:
        conn.execute(
            "UPDATE locations SET is_deleted = 1, deleted_at = ?, updated_at = ? WHERE location_id = ?",
            (now, now, record.location_id),
        )
        conn.commit()
    return record._replace(is_deleted=True, updated_at=now)
