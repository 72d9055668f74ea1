"""Error taxonomy for coordinate validation and location lookups."""


class GeofenceError(Exception):
    """Base error for the geofence service."""

    kind = "error"


class InvalidCoordinateError(GeofenceError):
    """Latitude/longitude out of range, or only one of the pair supplied."""

    kind = "invalid_coordinate"


class InvalidArgumentError(GeofenceError):
    """Non-positive radius or max_results, or max_results above the ceiling."""

    kind = "invalid_argument"


class QueryCancelledError(GeofenceError):
    """A proximity query was aborted through its cancel event."""

    kind = "cancelled"


class LocationNotFoundError(GeofenceError):
    kind = "not_found"

    def __init__(self, location_code: str):
        super().__init__(f"Location '{location_code}' not found.")
        self.location_code = location_code


class LocationAlreadyExistsError(GeofenceError):
    kind = "conflict"

    def __init__(self, location_code: str):
        super().__init__(f"Location '{location_code}' already exists.")
        self.location_code = location_code


class LocationAlreadyActiveError(GeofenceError):
    kind = "conflict"

    def __init__(self, location_code: str):
        super().__init__(f"Location '{location_code}' is already active.")
        self.location_code = location_code


class LocationAlreadyInactiveError(GeofenceError):
    kind = "conflict"

    def __init__(self, location_code: str):
        super().__init__(f"Location '{location_code}' is already inactive.")
        self.location_code = location_code
