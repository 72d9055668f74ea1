"""Pydantic models for the /locations endpoints."""
from pydantic import BaseModel, field_validator

from src.data.locations_repo import LocationRecord


class RegisterLocationRequest(BaseModel):
    location_code: str
    location_type_code: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str
    location_type_name: str | None = None
    # Coordinate tuple rules (pairing, ranges, radius) are enforced by the coordinate model
    latitude: float | None = None
    longitude: float | None = None
    geofence_radius: float | None = None

    @field_validator("location_code", "location_type_code")
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Code must not be empty.")
        return v


class UpdateCoordinatesRequest(BaseModel):
    location_code: str
    latitude: float
    longitude: float
    geofence_radius: float | None = None

    @field_validator("location_code")
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("location_code must not be empty.")
        return v


class LocationResponse(BaseModel):
    location_id: str
    location_code: str
    location_type_code: str
    location_type_name: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str
    is_active: bool
    created_at: str | None = None
    updated_at: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    geofence_radius: float | None = None

    @classmethod
    def from_record(cls, record: LocationRecord, **extra) -> "LocationResponse":
        return cls(
            location_id=record.location_id,
            location_code=record.location_code,
            location_type_code=record.location_type_code,
            location_type_name=record.location_type_name,
            address_line1=record.address_line1,
            address_line2=record.address_line2,
            city=record.city,
            state=record.state,
            zip_code=record.zip_code,
            country=record.country,
            is_active=record.is_active,
            created_at=record.created_at,
            updated_at=record.updated_at,
            latitude=record.coordinate.latitude,
            longitude=record.coordinate.longitude,
            geofence_radius=record.coordinate.geofence_radius,
            **extra,
        )


class LocationWithDistanceResponse(LocationResponse):
    distance_meters: float


class LocationsListResponse(BaseModel):
    locations: list[LocationResponse]


class NearbyLocationsResponse(BaseModel):
    radius_meters: float
    max_results: int
    locations: list[LocationWithDistanceResponse]
