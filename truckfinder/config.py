"""Application configuration via Pydantic Settings.

NOTE: We explicitly map the .env variable names (NOMINATIM_URL, TRUCK_API_URL,
GOOGLE_MAPS_API_KEY, etc.) to avoid silent misconfiguration.
"""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    # Geocoder
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        validation_alias="NOMINATIM_URL",
    )
    geocoder_user_agent: str = Field(
        default="truckfinder-location-service",
        validation_alias="GEOCODER_USER_AGENT",
    )
    geocoder_timeout_seconds: float = Field(default=10.0, validation_alias="GEOCODER_TIMEOUT_SECONDS")
    geocoder_country_codes: str = Field(default="", validation_alias="GEOCODER_COUNTRY_CODES")
    geocoder_language: str = Field(default="en", validation_alias="GEOCODER_LANGUAGE")
    google_maps_api_key: str = Field(default="", validation_alias="GOOGLE_MAPS_API_KEY")

    # Truck backend (opaque REST API)
    truck_api_url: str = Field(default="http://localhost:5000/api", validation_alias="TRUCK_API_URL")
    truck_api_timeout_seconds: float = Field(default=10.0, validation_alias="TRUCK_API_TIMEOUT_SECONDS")
    # When set, trucks are served from this JSON export instead of the backend
    truck_data_file: Path | None = Field(default=None, validation_alias="TRUCK_DATA_FILE")

    # Address suggestions
    suggestion_debounce_ms: int = Field(default=800, ge=0, validation_alias="SUGGESTION_DEBOUNCE_MS")
    suggestion_min_length: int = Field(default=3, ge=1, validation_alias="SUGGESTION_MIN_LENGTH")
    suggestion_limit: int = Field(default=5, ge=1, validation_alias="SUGGESTION_LIMIT")
    suggestion_focus_grace_ms: int = Field(default=3000, ge=0, validation_alias="SUGGESTION_FOCUS_GRACE_MS")

    # Proximity search
    default_radius_km: float = Field(default=10.0, ge=0.0, validation_alias="DEFAULT_RADIUS_KM")
    fallback_radius_km: float = Field(default=25.0, ge=0.0, validation_alias="FALLBACK_RADIUS_KM")

    # Reference point used when the device location is not available (KIIT Campus)
    default_latitude: float = Field(default=20.3538431, ge=-90.0, le=90.0, validation_alias="DEFAULT_LATITUDE")
    default_longitude: float = Field(default=85.8169059, ge=-180.0, le=180.0, validation_alias="DEFAULT_LONGITUDE")
    default_address: str = Field(default="KIIT Campus, Bhubaneswar", validation_alias="DEFAULT_ADDRESS")

    # App
    debug: bool = Field(default=False, validation_alias="DEBUG")
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        validation_alias="CORS_ORIGINS",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        # CORS_ORIGINS is a comma-separated list in the environment
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


settings = Settings()
