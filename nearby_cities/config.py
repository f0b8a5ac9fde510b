"""Runtime settings for geocoding, routing, and ranking."""

import os
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_RADIUS_KM = 100.0
DEFAULT_MAX_RESULTS = 100
DEFAULT_MIN_POPULATION = 10000


class GeocoderName(str, Enum):
    """Supported geocoding backends."""

    google = "google"
    open_meteo = "open-meteo"


class Settings(BaseModel):
    """Configuration handed to the collaborators at construction."""

    google_api_key: str = ""
    geocoder: GeocoderName = GeocoderName.google
    gazetteer_path: str = "cities1000.txt"
    radius_km: float = Field(DEFAULT_RADIUS_KM, gt=0)
    max_results: int = Field(DEFAULT_MAX_RESULTS, gt=0)
    min_population: int = Field(DEFAULT_MIN_POPULATION, ge=0)
    http_timeout_s: float = Field(5.0, gt=0)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            A validated Settings instance.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        return cls(
            google_api_key=os.getenv("GOOGLE_MAPS_API_KEY", ""),
            geocoder=os.getenv("NEARBY_GEOCODER", GeocoderName.google.value),
            gazetteer_path=os.getenv("NEARBY_GAZETTEER_PATH", "cities1000.txt"),
            radius_km=os.getenv("NEARBY_RADIUS_KM", str(DEFAULT_RADIUS_KM)),
            max_results=os.getenv("NEARBY_MAX_RESULTS", str(DEFAULT_MAX_RESULTS)),
            min_population=os.getenv(
                "NEARBY_MIN_POPULATION", str(DEFAULT_MIN_POPULATION)
            ),
            http_timeout_s=os.getenv("NEARBY_HTTP_TIMEOUT_S", "5"),
        )
