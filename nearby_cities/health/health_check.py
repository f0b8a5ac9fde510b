"""Health checks for the gazetteer and the external map APIs."""

import httpx

from nearby_cities.config import GeocoderName
from nearby_cities.gazetteer.loader import GazetteerError
from nearby_cities.logging_config import logger
from nearby_cities.maps_service.maps import GOOGLE_GEOCODE_URL, OPEN_METEO_GEOCODE_URL
from nearby_cities.models.health import ServiceStatus
from nearby_cities.runtime import get_gazetteer, get_settings


def is_gazetteer_available() -> ServiceStatus:
    """Check that the gazetteer loads and holds at least one city.

    Returns:
        ServiceStatus.available when cities are loaded, else not_available.
    """
    try:
        cities = get_gazetteer()
    except GazetteerError:
        logger.error("GAZETTEER UNAVAILABLE")
        return ServiceStatus.not_available
    return ServiceStatus.available if cities else ServiceStatus.not_available


async def is_maps_api_available() -> bool:
    """Check the configured geocoding API for availability.

    Returns:
        True if the API answers a sample lookup.
    """
    settings = get_settings()
    if settings.geocoder == GeocoderName.open_meteo:
        url, params = OPEN_METEO_GEOCODE_URL, {"name": "London", "count": 1}
    else:
        url, params = GOOGLE_GEOCODE_URL, {
            "address": "London",
            "key": settings.google_api_key,
        }
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_s) as client:
            response = await client.get(url, params=params)
            if response.status_code != 200:
                return False
            data = response.json()
            return bool(data.get("results")) and data.get("status", "OK") == "OK"
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("MAPS API UNAVAILABLE", error=str(exc))
        return False
