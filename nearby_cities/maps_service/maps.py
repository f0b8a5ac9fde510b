"""Geocoding and driving-distance clients for external map services."""

from typing import Protocol

import httpx

from nearby_cities.config import GeocoderName, Settings
from nearby_cities.logging_config import logger
from nearby_cities.models.city import Coordinate

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
OPEN_METEO_GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"


class MapsServiceError(Exception):
    """Base exception for map service failures."""
    pass


class LocationNotFoundError(MapsServiceError):
    """Raised when geocoding returns no usable result."""
    pass


class DistanceUnavailableError(MapsServiceError):
    """Raised when no driving route is known between two points."""
    pass


class ExternalAPIError(MapsServiceError):
    """Raised when an external map API call fails."""
    pass


class Geocoder(Protocol):
    def geocode(self, address: str) -> Coordinate: ...


class DistanceResolver(Protocol):
    def driving_distance_m(self, origin: Coordinate, destination: Coordinate) -> int: ...


def _request(
    *,
    url: str,
    params: dict,
    timeout: float,
    event_prefix: str,
    log_context: dict,
    error_message: str,
) -> dict:
    """Execute a single HTTP GET and decode its JSON body.

    Args:
        url: The URL to call.
        params: Query parameters to include in the request.
        timeout: Request timeout in seconds.
        event_prefix: Log event prefix for consistent names.
        log_context: Extra log fields for all events.
        error_message: Error message to wrap in ExternalAPIError.

    Returns:
        The decoded JSON payload.

    Raises:
        ExternalAPIError: When the request fails or the body is not a JSON object.
    """
    try:
        response = httpx.get(url, params=params, timeout=timeout)
        logger.info(
            f"{event_prefix}_RESPONSE",
            **log_context,
            status=response.status_code,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as exc:
        logger.error(
            f"{event_prefix}_BAD_STATUS",
            **log_context,
            status=exc.response.status_code,
        )
        raise ExternalAPIError(error_message) from exc
    except httpx.RequestError as exc:
        logger.error(f"{event_prefix}_REQUEST_FAILED", **log_context, error=str(exc))
        raise ExternalAPIError(error_message) from exc
    except ValueError as exc:
        logger.error(f"{event_prefix}_BAD_PAYLOAD", **log_context, error=str(exc))
        raise ExternalAPIError(error_message) from exc

    if not isinstance(data, dict):
        logger.error(
            f"{event_prefix}_BAD_PAYLOAD",
            **log_context,
            error=f"expected a JSON object, got {type(data).__name__}",
        )
        raise ExternalAPIError(error_message)
    return data


class GoogleGeocoder:
    """Resolve addresses with the Google Geocoding API."""

    def __init__(self, api_key: str, timeout: float = 5.0):
        self.api_key = api_key
        self.timeout = timeout

    def geocode(self, address: str) -> Coordinate:
        """Resolve a free-text address to coordinates.

        Args:
            address: Address or place name to look up.

        Returns:
            Coordinate of the first matching result.

        Raises:
            LocationNotFoundError: If the API has no match for the address.
            ExternalAPIError: If the request or payload is invalid.
        """
        data = _request(
            url=GOOGLE_GEOCODE_URL,
            params={"address": address, "key": self.api_key},
            timeout=self.timeout,
            event_prefix="GEOCODE",
            log_context={"address": address},
            error_message="Geocoding failed",
        )

        status = data.get("status")
        if status == "ZERO_RESULTS" or (status == "OK" and not data.get("results")):
            raise LocationNotFoundError(f"Location not found: {address}")
        if status != "OK":
            logger.error(
                "GEOCODE_BAD_STATUS",
                address=address,
                api_status=status,
                error=data.get("error_message"),
            )
            raise ExternalAPIError("Geocoding failed")

        try:
            location = data["results"][0]["geometry"]["location"]
            return Coordinate(lat=location["lat"], lng=location["lng"])
        except (AttributeError, TypeError, KeyError, IndexError, ValueError) as exc:
            logger.error("GEOCODE_BAD_PAYLOAD", address=address, error=str(exc))
            raise ExternalAPIError("Geocoding failed") from exc


class OpenMeteoGeocoder:
    """Resolve place names with the key-less Open-Meteo geocoding API."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def geocode(self, address: str) -> Coordinate:
        """Resolve a place name to coordinates.

        Args:
            address: Place name to look up.

        Returns:
            Coordinate of the first matching result.

        Raises:
            LocationNotFoundError: If no place results are returned.
            ExternalAPIError: If the request or payload is invalid.
        """
        data = _request(
            url=OPEN_METEO_GEOCODE_URL,
            params={"name": address, "count": 1},
            timeout=self.timeout,
            event_prefix="GEOCODE",
            log_context={"address": address},
            error_message="Geocoding failed",
        )

        try:
            results = data.get("results") or []
            if not results:
                raise LocationNotFoundError(f"Location not found: {address}")
            return Coordinate(lat=results[0]["latitude"], lng=results[0]["longitude"])
        except (AttributeError, TypeError, KeyError, ValueError) as exc:
            logger.error("GEOCODE_BAD_PAYLOAD", address=address, error=str(exc))
            raise ExternalAPIError("Geocoding failed") from exc


class GoogleDistanceResolver:
    """Resolve driving distances with the Google Distance Matrix API."""

    def __init__(self, api_key: str, timeout: float = 5.0):
        self.api_key = api_key
        self.timeout = timeout

    def driving_distance_m(self, origin: Coordinate, destination: Coordinate) -> int:
        """Return the road distance in meters between two points.

        Args:
            origin: Start of the route.
            destination: End of the route.

        Returns:
            Driving distance in meters.

        Raises:
            DistanceUnavailableError: If no route is known.
            ExternalAPIError: If the request or payload is invalid.
        """
        log_context = {
            "origin": f"{origin.lat},{origin.lng}",
            "destination": f"{destination.lat},{destination.lng}",
        }
        data = _request(
            url=GOOGLE_DISTANCE_MATRIX_URL,
            params={
                "origins": log_context["origin"],
                "destinations": log_context["destination"],
                "mode": "driving",
                "units": "metric",
                "key": self.api_key,
            },
            timeout=self.timeout,
            event_prefix="DISTANCE",
            log_context=log_context,
            error_message="Distance lookup failed",
        )

        if data.get("status") != "OK":
            logger.error(
                "DISTANCE_BAD_STATUS",
                **log_context,
                api_status=data.get("status"),
                error=data.get("error_message"),
            )
            raise ExternalAPIError("Distance lookup failed")

        try:
            element = data["rows"][0]["elements"][0]
            if element.get("status") != "OK":
                raise DistanceUnavailableError(
                    f"No driving route: {element.get('status')}"
                )
            return int(element["distance"]["value"])
        except (AttributeError, TypeError, KeyError, IndexError, ValueError) as exc:
            logger.error("DISTANCE_BAD_PAYLOAD", **log_context, error=str(exc))
            raise ExternalAPIError("Distance lookup failed") from exc


def build_geocoder(settings: Settings) -> Geocoder:
    """Create the geocoder selected in the settings."""
    if settings.geocoder == GeocoderName.open_meteo:
        return OpenMeteoGeocoder(timeout=settings.http_timeout_s)
    return GoogleGeocoder(settings.google_api_key, timeout=settings.http_timeout_s)


def build_distance_resolver(settings: Settings) -> DistanceResolver:
    """Create the driving-distance resolver."""
    return GoogleDistanceResolver(
        settings.google_api_key, timeout=settings.http_timeout_s
    )
