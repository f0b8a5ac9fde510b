"""Process-wide settings, gazetteer, and map clients."""

from functools import lru_cache

from nearby_cities.config import Settings
from nearby_cities.gazetteer.loader import load_gazetteer_file
from nearby_cities.maps_service.maps import (
    DistanceResolver,
    Geocoder,
    build_distance_resolver,
    build_geocoder,
)
from nearby_cities.models.city import CityRecord


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_gazetteer() -> tuple[CityRecord, ...]:
    """Load the gazetteer once; it is shared read-only afterwards."""
    settings = get_settings()
    return tuple(
        load_gazetteer_file(
            settings.gazetteer_path, min_population=settings.min_population
        )
    )


@lru_cache
def get_geocoder() -> Geocoder:
    return build_geocoder(get_settings())


@lru_cache
def get_distance_resolver() -> DistanceResolver:
    return build_distance_resolver(get_settings())
