from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Geofence Locations API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # CORS: "*" for dev; in production set to comma-separated origins
    cors_origins: str = "*"
    locations_db_path: str = "data/locations.db"  # Path relative to backend root, or absolute

    # Product (tenant) used when a request carries no X-Product header. Empty = header required.
    default_product: str = ""

    rate_limit: str = "100/minute"

    # Nearby defaults (5000 m, 10 results) are fixed in src.geo.proximity; only the ceiling is tunable
    nearby_max_results_ceiling: int = 100


def get_settings() -> Settings:
    return Settings()
