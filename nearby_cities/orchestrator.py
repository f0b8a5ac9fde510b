"""Geocode input locations and write their nearby cities back."""

from collections.abc import Sequence

from pydantic import BaseModel
from structlog.contextvars import bound_contextvars

from nearby_cities.config import DEFAULT_MAX_RESULTS, Settings
from nearby_cities.logging_config import logger
from nearby_cities.maps_service.maps import (
    DistanceResolver,
    Geocoder,
    MapsServiceError,
)
from nearby_cities.models.city import CityRecord, Coordinate, RankedCity
from nearby_cities.ranking.ranker import rank_nearby_cities
from nearby_cities.sheets.table import OUTPUT_COLUMN, Sheet

NOT_FOUND_TEXT = "Coordinates not found"


class RunSummary(BaseModel):
    """Row counts for one pass over a sheet."""

    processed: int = 0
    not_found: int = 0
    skipped: int = 0


def format_ranked_city(ranked: RankedCity) -> str:
    """Render a ranked city as ``Name (12.3 km, CC, Pop: 12345)``."""
    record = ranked.record
    return (
        f"{record.name} ({ranked.driving_distance_km:.1f} km, "
        f"{record.country}, Pop: {record.population})"
    )


def describe_nearby_cities(ranked: Sequence[RankedCity]) -> str:
    """Join formatted cities with ``", "``; empty input gives ``""``."""
    return ", ".join(format_ranked_city(item) for item in ranked)


def find_nearby(
    location: str,
    geocoder: Geocoder,
    resolver: DistanceResolver,
    gazetteer: Sequence[CityRecord],
    radius_km: float,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> tuple[Coordinate, list[RankedCity]]:
    """Geocode a location and rank the cities around it.

    Args:
        location: Free-text location query.
        geocoder: Geocoding collaborator.
        resolver: Driving-distance collaborator.
        gazetteer: Candidate cities.
        radius_km: Inclusion radius.
        max_results: Maximum number of cities returned.

    Returns:
        The resolved coordinate and the ranked cities.

    Raises:
        LocationNotFoundError: If the location cannot be geocoded.
        ExternalAPIError: If the geocoding request fails.
    """
    origin = geocoder.geocode(location)
    logger.info("LOCATION_GEOCODED", location=location, lat=origin.lat, lng=origin.lng)
    ranked = rank_nearby_cities(
        origin, gazetteer, resolver, radius_km=radius_km, max_results=max_results
    )
    return origin, ranked


def process_sheet(
    sheet: Sheet,
    geocoder: Geocoder,
    resolver: DistanceResolver,
    gazetteer: Sequence[CityRecord],
    settings: Settings,
) -> RunSummary:
    """Fill the output column of every row that has a location.

    A geocoding failure only affects its own row, which receives
    NOT_FOUND_TEXT. Rows with an empty location are left untouched.

    Args:
        sheet: Table to read locations from and write results to.
        geocoder: Geocoding collaborator.
        resolver: Driving-distance collaborator.
        gazetteer: Candidate cities.
        settings: Radius and result cap to apply.

    Returns:
        Counts of processed, not-found, and skipped rows.
    """
    summary = RunSummary()
    for row_index, location in sheet.read_rows():
        location = location.strip()
        if not location:
            summary.skipped += 1
            continue

        with bound_contextvars(row=row_index):
            try:
                _, ranked = find_nearby(
                    location,
                    geocoder,
                    resolver,
                    gazetteer,
                    radius_km=settings.radius_km,
                    max_results=settings.max_results,
                )
            except MapsServiceError as exc:
                logger.warning("ROW_NOT_FOUND", location=location, error=str(exc))
                sheet.write_cell(row_index, OUTPUT_COLUMN, NOT_FOUND_TEXT)
                summary.not_found += 1
                continue

            sheet.write_cell(row_index, OUTPUT_COLUMN, describe_nearby_cities(ranked))
            summary.processed += 1
            logger.info("ROW_PROCESSED", location=location, cities=len(ranked))

    sheet.save()
    logger.info("SHEET_PROCESSED", **summary.model_dump())
    return summary
