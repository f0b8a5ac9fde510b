"""Command-line entry points for processing sheets and single lookups."""

from pathlib import Path
from typing import Optional

import typer

from nearby_cities.config import GeocoderName, Settings
from nearby_cities.gazetteer.loader import GazetteerError, load_gazetteer_file
from nearby_cities.logging_config import logger
from nearby_cities.maps_service.maps import (
    MapsServiceError,
    build_distance_resolver,
    build_geocoder,
)
from nearby_cities.orchestrator import (
    NOT_FOUND_TEXT,
    describe_nearby_cities,
    find_nearby,
    process_sheet,
)
from nearby_cities.sheets.table import SheetError, open_sheet

app = typer.Typer(
    add_completion=False, help="Find the nearest cities by road for each location"
)


def _settings(
    gazetteer_path: Optional[Path],
    radius_km: Optional[float],
    max_results: Optional[int],
    geocoder: Optional[GeocoderName],
) -> Settings:
    overrides = {
        "gazetteer_path": str(gazetteer_path) if gazetteer_path else None,
        "radius_km": radius_km,
        "max_results": max_results,
        "geocoder": geocoder,
    }
    settings = Settings.from_env()
    return Settings.model_validate(
        {**settings.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
    )


def _load_gazetteer(settings: Settings):
    try:
        return load_gazetteer_file(
            settings.gazetteer_path, min_population=settings.min_population
        )
    except GazetteerError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.command("run")
def run_sheet(
    sheet_path: Path = typer.Argument(..., exists=True, readable=True, writable=True),
    sheet_name: Optional[str] = typer.Option(None, "--sheet-name"),
    gazetteer_path: Optional[Path] = typer.Option(None, "--gazetteer"),
    radius_km: Optional[float] = typer.Option(None, "--radius-km"),
    max_results: Optional[int] = typer.Option(None, "--max-results"),
    geocoder: Optional[GeocoderName] = typer.Option(None, "--geocoder"),
) -> None:
    """Write nearby cities for every location in column A into column B."""
    settings = _settings(gazetteer_path, radius_km, max_results, geocoder)
    gazetteer = _load_gazetteer(settings)
    try:
        sheet = open_sheet(sheet_path, sheet_name=sheet_name)
        summary = process_sheet(
            sheet,
            build_geocoder(settings),
            build_distance_resolver(settings),
            gazetteer,
            settings,
        )
    except SheetError as exc:
        logger.error("SHEET_FAILED", path=str(sheet_path), error=str(exc))
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"processed={summary.processed} not_found={summary.not_found} skipped={summary.skipped}"
    )


@app.command("lookup")
def lookup_location(
    location: str = typer.Argument(...),
    gazetteer_path: Optional[Path] = typer.Option(None, "--gazetteer"),
    radius_km: Optional[float] = typer.Option(None, "--radius-km"),
    max_results: Optional[int] = typer.Option(None, "--max-results"),
    geocoder: Optional[GeocoderName] = typer.Option(None, "--geocoder"),
) -> None:
    """Print the nearby cities for a single location."""
    settings = _settings(gazetteer_path, radius_km, max_results, geocoder)
    gazetteer = _load_gazetteer(settings)
    try:
        _, ranked = find_nearby(
            location,
            build_geocoder(settings),
            build_distance_resolver(settings),
            gazetteer,
            radius_km=settings.radius_km,
            max_results=settings.max_results,
        )
    except MapsServiceError as exc:
        logger.warning("LOOKUP_NOT_FOUND", location=location, error=str(exc))
        typer.echo(NOT_FOUND_TEXT)
        return

    typer.echo(describe_nearby_cities(ranked))
