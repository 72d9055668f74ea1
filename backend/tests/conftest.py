"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure backend root is on path when running pytest from repo root or backend
backend = Path(__file__).resolve().parent.parent
if str(backend) not in sys.path:
    sys.path.insert(0, str(backend))

from src.data.locations_repo import init_db, register_location  # noqa: E402


def add_location(db_path, code, lat=None, lng=None, radius=None, product="ProductA", **kwargs):
    """Register a minimal location; address fields are filler."""
    return register_location(
        db_path,
        product=product,
        location_code=code,
        location_type_code=kwargs.pop("location_type_code", "WAREHOUSE"),
        address_line1=kwargs.pop("address_line1", "1 Test St"),
        city=kwargs.pop("city", "Atlanta"),
        state=kwargs.pop("state", "GA"),
        zip_code=kwargs.pop("zip_code", "30309"),
        country=kwargs.pop("country", "USA"),
        latitude=lat,
        longitude=lng,
        geofence_radius=radius,
        **kwargs,
    )


@pytest.fixture
def locations_db(tmp_path):
    """Empty, initialized locations DB."""
    db = tmp_path / "locations.db"
    init_db(db)
    return db
