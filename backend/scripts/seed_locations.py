#!/usr/bin/env python3
"""
Seed the locations DB from a CSV (creates the table if needed).

Usage:
  python scripts/seed_locations.py
  python scripts/seed_locations.py --csv data/my_locations.csv --db data/locations.db

CSV columns: product, location_code, location_type_code, address_line1, address_line2,
city, state, zip_code, country, latitude, longitude, geofence_radius, is_active.
Rows whose code already exists in the product only get their coordinates refreshed.
"""
import argparse
import csv
import logging
import sys
from pathlib import Path

backend = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend))

from src.data.locations_repo import init_db, register_location
from src.geo.errors import GeofenceError, LocationAlreadyExistsError
from src.locations.service import clear_location_coordinates, update_coordinates

logger = logging.getLogger("seed_locations")


def _float_or_none(value: str | None) -> float | None:
    value = (value or "").strip()
    return float(value) if value else None


def seed_row(db_path: Path, row: dict) -> str:
    """Insert or refresh one CSV row. Returns "inserted" or "updated"."""
    product = (row.get("product") or "").strip()
    code = (row.get("location_code") or "").strip()
    lat = _float_or_none(row.get("latitude"))
    lng = _float_or_none(row.get("longitude"))
    radius = _float_or_none(row.get("geofence_radius"))
    try:
        register_location(
            db_path,
            product=product,
            location_code=code,
            location_type_code=row.get("location_type_code", ""),
            address_line1=row.get("address_line1", ""),
            address_line2=row.get("address_line2"),
            city=row.get("city", ""),
            state=row.get("state", ""),
            zip_code=row.get("zip_code", ""),
            country=row.get("country", ""),
            latitude=lat,
            longitude=lng,
            geofence_radius=radius,
            is_active=(row.get("is_active") or "1").strip() not in ("0", "false", "False"),
        )
        return "inserted"
    except LocationAlreadyExistsError:
        if lat is None and lng is None:
            clear_location_coordinates(db_path, product, code)
        else:
            update_coordinates(db_path, product, code, lat, lng, radius)
        return "updated"


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed locations (and init locations DB)")
    parser.add_argument(
        "--csv",
        default=backend / "data" / "locations_seed.csv",
        type=Path,
        help="CSV with location rows (see module docstring for columns)",
    )
    parser.add_argument(
        "--db",
        default=backend / "data" / "locations.db",
        type=Path,
        help="Path to locations SQLite DB",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")

    if not args.csv.exists():
        print(f"Error: CSV not found: {args.csv}", file=sys.stderr)
        return 1

    init_db(args.db)

    counts = {"inserted": 0, "updated": 0, "skipped": 0}
    with open(args.csv, newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            try:
                counts[seed_row(args.db, row)] += 1
            except (GeofenceError, ValueError) as e:
                logger.warning("skipping line %s: %s", line_no, e)
                counts["skipped"] += 1

    print(
        f"Seeded {args.db}: {counts['inserted']} inserted, "
        f"{counts['updated']} updated, {counts['skipped']} skipped"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
