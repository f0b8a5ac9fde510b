"""FastAPI application routes, middleware, and metrics."""

import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from structlog.contextvars import bind_contextvars, clear_contextvars

from nearby_cities.health.health_check import is_gazetteer_available, is_maps_api_available
from nearby_cities.logging_config import logger
from nearby_cities.maps_service.maps import (
    ExternalAPIError,
    LocationNotFoundError,
    MapsServiceError,
)
from nearby_cities.models.health import Dependencies, HealthResponse, ServiceStatus
from nearby_cities.models.nearby import NearbyCity, NearbyResponse
from nearby_cities.orchestrator import describe_nearby_cities, find_nearby
from nearby_cities.runtime import (
    get_distance_resolver,
    get_gazetteer,
    get_geocoder,
    get_settings,
)

app = FastAPI()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)
NEARBY_CITIES_RETURNED = Histogram(
    "nearby_cities_returned",
    "Number of cities returned per nearby lookup",
    buckets=(0, 1, 5, 10, 25, 50, 100),
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_s * 1000, 2),
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.exception_handler(LocationNotFoundError)
async def location_not_found_handler(request: Request, exc: LocationNotFoundError):
    """Convert geocoding misses into 404 responses.

    Args:
        request: Incoming HTTP request.
        exc: Raised location lookup error.

    Returns:
        A JSON response with the error detail.
    """
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ExternalAPIError)
async def external_api_error_handler(request: Request, exc: ExternalAPIError):
    """Convert external API errors into 502 responses.

    Args:
        request: Incoming HTTP request.
        exc: Raised external API error.

    Returns:
        A JSON response with the error detail.
    """
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(MapsServiceError)
async def maps_service_error_handler(request: Request, exc: MapsServiceError):
    """Convert unexpected map service errors into 500 responses.

    Args:
        request: Incoming HTTP request.
        exc: Raised map service error.

    Returns:
        A JSON response with a generic error message.
    """
    return JSONResponse(status_code=500, content={"detail": "Unexpected error"})


@app.get("/")
async def root():
    """Return a basic liveness response."""
    return {"message": "Hello World"}


@app.get("/nearby")
def get_nearby_cities(location: str) -> NearbyResponse:
    """Rank the cities nearest by road to a free-text location.

    Args:
        location: Location string from the query parameter.

    Returns:
        A NearbyResponse with the resolved point and ranked cities.
    """
    settings = get_settings()
    origin, ranked = find_nearby(
        location,
        get_geocoder(),
        get_distance_resolver(),
        get_gazetteer(),
        radius_km=settings.radius_km,
        max_results=settings.max_results,
    )
    NEARBY_CITIES_RETURNED.observe(len(ranked))
    return NearbyResponse(
        location=location,
        latitude=origin.lat,
        longitude=origin.lng,
        radius_km=settings.radius_km,
        cities=[NearbyCity.from_ranked(item) for item in ranked],
        summary=describe_nearby_cities(ranked),
    )


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report API health and dependency availability.

    Returns:
        A HealthResponse containing dependency status.
    """
    maps_api_available = await is_maps_api_available()
    return HealthResponse(
        status="ok",
        dependencies=Dependencies(
            maps_api=ServiceStatus.available
            if maps_api_available
            else ServiceStatus.not_available,
            gazetteer=is_gazetteer_available(),
        ),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
