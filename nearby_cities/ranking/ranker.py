"""Rank gazetteer cities by driving distance from an origin."""

from collections.abc import Sequence

from nearby_cities.config import DEFAULT_MAX_RESULTS
from nearby_cities.geo.distance import distance_km
from nearby_cities.logging_config import logger
from nearby_cities.maps_service.maps import DistanceResolver, MapsServiceError
from nearby_cities.models.city import CityRecord, Coordinate, RankedCity


def rank_nearby_cities(
    origin: Coordinate,
    gazetteer: Sequence[CityRecord],
    resolver: DistanceResolver,
    radius_km: float,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[RankedCity]:
    """Find the cities nearest to ``origin`` by road.

    Straight-line distance is checked first so the resolver is only
    called for cities inside ``radius_km``. The same radius, in meters,
    is then applied to the driving distance.

    Args:
        origin: Query point.
        gazetteer: Candidate cities.
        resolver: Driving-distance collaborator.
        radius_km: Inclusion radius for both distance checks.
        max_results: Maximum number of cities returned.

    Returns:
        Ranked cities, nearest first. Equal distances keep gazetteer order.
    """
    radius_m = radius_km * 1000
    candidates = [city for city in gazetteer if distance_km(origin, city) <= radius_km]
    logger.info(
        "CANDIDATES_ADMITTED",
        candidates=len(candidates),
        gazetteer=len(gazetteer),
        radius_km=radius_km,
    )

    ranked: list[RankedCity] = []
    for city in candidates:
        try:
            meters = resolver.driving_distance_m(origin, city.coordinate)
        except MapsServiceError as exc:
            logger.warning("CANDIDATE_DROPPED", city=city.name, error=str(exc))
            continue
        if meters > radius_m:
            logger.debug("CANDIDATE_TOO_FAR", city=city.name, driving_distance_m=meters)
            continue
        ranked.append(RankedCity(record=city, driving_distance_m=meters))

    # sorted() is stable, so ties keep gazetteer order
    ranked = sorted(ranked, key=lambda item: item.driving_distance_m)
    return ranked[:max_results]
