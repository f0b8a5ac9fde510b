"""Load a GeoNames-style tab-separated city list."""

import math
from pathlib import Path

from nearby_cities.config import DEFAULT_MIN_POPULATION
from nearby_cities.logging_config import logger
from nearby_cities.models.city import CityRecord

NAME_FIELD = 1
LAT_FIELD = 4
LNG_FIELD = 5
COUNTRY_FIELD = 8
POPULATION_FIELD = 14


class GazetteerError(Exception):
    """Raised when the gazetteer file cannot be read."""
    pass


def _field(fields: list[str], index: int) -> str:
    return fields[index].strip() if index < len(fields) else ""


def _parse_coordinate(value: str, limit: float) -> float | None:
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def _parse_population(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def load_gazetteer(
    text: str, min_population: int = DEFAULT_MIN_POPULATION
) -> list[CityRecord]:
    """Parse gazetteer text into city records.

    The first line is a header and is skipped. Lines with unusable
    coordinates or a population not above ``min_population`` are dropped.

    Args:
        text: Raw tab-separated gazetteer content.
        min_population: Exclusive population floor.

    Returns:
        City records in input line order.
    """
    cities: list[CityRecord] = []
    skipped = 0

    # Only "\n" ends a row; free-text columns may hold other line separators
    for line in text.split("\n")[1:]:
        fields = line.rstrip("\r").split("\t")
        lat = _parse_coordinate(_field(fields, LAT_FIELD), 90)
        lng = _parse_coordinate(_field(fields, LNG_FIELD), 180)
        population = _parse_population(_field(fields, POPULATION_FIELD))

        if lat is None or lng is None or population <= min_population:
            skipped += 1
            continue

        cities.append(
            CityRecord(
                name=_field(fields, NAME_FIELD),
                lat=lat,
                lng=lng,
                country=_field(fields, COUNTRY_FIELD),
                population=population,
            )
        )

    logger.info("GAZETTEER_PARSED", cities=len(cities), skipped=skipped)
    return cities


def load_gazetteer_file(
    path: str | Path, min_population: int = DEFAULT_MIN_POPULATION
) -> list[CityRecord]:
    """Read and parse a gazetteer file.

    Args:
        path: Location of the tab-separated city list.
        min_population: Exclusive population floor.

    Returns:
        City records in file order.

    Raises:
        GazetteerError: If the file cannot be read.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("GAZETTEER_READ_FAILED", path=str(path), error=str(exc))
        raise GazetteerError(f"Cannot read gazetteer: {path}") from exc

    cities = load_gazetteer(text, min_population=min_population)
    logger.info("GAZETTEER_LOADED", path=str(path), cities=len(cities))
    return cities
