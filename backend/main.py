import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from settings import get_settings
from src.data.locations_repo import (
    init_db,
    list_locations,
    register_location,
    set_active,
    soft_delete_location,
)
from src.geo.errors import GeofenceError
from src.geo.proximity import DEFAULT_NEARBY_MAX_RESULTS, DEFAULT_NEARBY_RADIUS_M
from src.locations.models import (
    LocationResponse,
    LocationsListResponse,
    LocationWithDistanceResponse,
    NearbyLocationsResponse,
    RegisterLocationRequest,
    UpdateCoordinatesRequest,
)
from src.locations.service import by_coordinates, clear_location_coordinates, nearby, update_coordinates
from src.middleware import ProductContextMiddleware, RequestLoggingMiddleware, get_product
from src.monitoring import get_metrics

settings = get_settings()
BACKEND_ROOT = Path(__file__).resolve().parent
LOCATIONS_DB = BACKEND_ROOT / settings.locations_db_path

# Structured logging: include module and level; handlers can add JSON later
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])

_ERROR_STATUS = {
    "invalid_coordinate": 400,
    "invalid_argument": 400,
    "not_found": 404,
    "conflict": 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(LOCATIONS_DB)
    yield


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(GeofenceError)
def geofence_error_handler(request: Request, exc: GeofenceError):
    """Map the error taxonomy to status codes; body carries a machine-readable kind."""
    status_code = _ERROR_STATUS.get(exc.kind, 400)
    logger.info("telemetry rejected path=%s kind=%s detail=%s", request.url.path, exc.kind, str(exc))
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": exc.kind})


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Return consistent JSON error for unhandled exceptions (500). Skip validation/HTTP errors."""
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc
    logger.exception("telemetry unhandled_exception path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )


# Order: last added = outermost. CORS wraps logging, which wraps product resolution.
app.add_middleware(ProductContextMiddleware, default_product=settings.default_product)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/favicon.ico", include_in_schema=False)
@limiter.exempt
def favicon(request: Request):
    """Return 204 so browser favicon requests don't log 404."""
    return Response(status_code=204)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    logger.info("telemetry route=health")
    return {"status": "ok"}


@app.get("/metrics")
@limiter.exempt
def metrics(request: Request):
    """Request counts, geofence query outcomes and uptime."""
    return get_metrics()


# --- Geofence queries ---


@app.get("/locations/by-coordinates", response_model=LocationWithDistanceResponse)
def get_location_by_coordinates(request: Request, latitude: float, longitude: float):
    """
    Location whose geofence contains (latitude, longitude). When geofences overlap,
    the location closest to the point wins. 404 with error=not_found when none does.
    """
    match = by_coordinates(LOCATIONS_DB, get_product(request), latitude, longitude)
    if match is None:
        return JSONResponse(
            status_code=404,
            content={"detail": "No location geofence contains these coordinates.", "error": "not_found"},
        )
    return LocationWithDistanceResponse.from_record(match.location, distance_meters=match.distance_m)


@app.get("/locations/nearby", response_model=NearbyLocationsResponse)
def get_nearby_locations(
    request: Request,
    latitude: float,
    longitude: float,
    radius_meters: float | None = None,
    max_results: int | None = None,
):
    """Locations within radius_meters (default 5000) ordered by distance, at most max_results (default 10)."""
    if radius_meters is None:
        radius_meters = DEFAULT_NEARBY_RADIUS_M
    if max_results is None:
        max_results = DEFAULT_NEARBY_MAX_RESULTS
    matches = nearby(
        LOCATIONS_DB,
        get_product(request),
        latitude,
        longitude,
        radius_m=radius_meters,
        max_results=max_results,
        max_results_ceiling=settings.nearby_max_results_ceiling,
    )
    return NearbyLocationsResponse(
        radius_meters=radius_meters,
        max_results=max_results,
        locations=[
            LocationWithDistanceResponse.from_record(m.location, distance_meters=m.distance_m)
            for m in matches
        ],
    )


@app.put("/locations/coordinates", response_model=LocationResponse)
def put_location_coordinates(request: Request, body: UpdateCoordinatesRequest):
    """Set latitude, longitude and (optional) geofence radius of a location in one step."""
    record = update_coordinates(
        LOCATIONS_DB,
        get_product(request),
        body.location_code,
        body.latitude,
        body.longitude,
        body.geofence_radius,
    )
    return LocationResponse.from_record(record)


@app.delete("/locations/{location_code}/coordinates", response_model=LocationResponse)
def delete_location_coordinates(request: Request, location_code: str):
    """Clear latitude, longitude and geofence radius together."""
    record = clear_location_coordinates(LOCATIONS_DB, get_product(request), location_code)
    return LocationResponse.from_record(record)


# --- Location lifecycle (feeds the active / soft-delete filters) ---


@app.post("/locations/register", response_model=LocationResponse, status_code=201)
def post_register_location(request: Request, body: RegisterLocationRequest):
    record = register_location(
        LOCATIONS_DB,
        product=get_product(request),
        location_code=body.location_code,
        location_type_code=body.location_type_code,
        location_type_name=body.location_type_name,
        address_line1=body.address_line1,
        address_line2=body.address_line2,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        country=body.country,
        latitude=body.latitude,
        longitude=body.longitude,
        geofence_radius=body.geofence_radius,
    )
    logger.info("telemetry route=register location_code=%s", record.location_code)
    return LocationResponse.from_record(record)


@app.get("/locations", response_model=LocationsListResponse)
def get_locations(request: Request, location_code: str = ""):
    """Locations of the caller's product; location_code filters by prefix (min 2 chars)."""
    records = list_locations(LOCATIONS_DB, get_product(request), location_code or None)
    return LocationsListResponse(locations=[LocationResponse.from_record(r) for r in records])


@app.put("/locations/{location_code}/activate", response_model=LocationResponse)
def put_activate_location(request: Request, location_code: str):
    return LocationResponse.from_record(set_active(LOCATIONS_DB, get_product(request), location_code, True))


@app.put("/locations/{location_code}/deactivate", response_model=LocationResponse)
def put_deactivate_location(request: Request, location_code: str):
    return LocationResponse.from_record(set_active(LOCATIONS_DB, get_product(request), location_code, False))


@app.delete("/locations/{location_code}", response_model=LocationResponse)
def delete_location(request: Request, location_code: str):
    """Soft delete: the location drops out of every query but the row is kept."""
    record = soft_delete_location(LOCATIONS_DB, get_product(request), location_code)
    logger.info("telemetry route=delete location_code=%s", location_code)
    return LocationResponse.from_record(record)
