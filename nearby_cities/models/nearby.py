"""Response models for the nearby-city endpoint."""

from pydantic import BaseModel

from nearby_cities.models.city import RankedCity


class NearbyCity(BaseModel):
    """A ranked city as exposed by the API."""

    name: str
    country: str
    population: int
    latitude: float
    longitude: float
    driving_distance_km: float

    @classmethod
    def from_ranked(cls, ranked: RankedCity) -> "NearbyCity":
        """Flatten a RankedCity into the API shape.

        Args:
            ranked: Ranked city produced by the ranker.

        Returns:
            A populated NearbyCity model.
        """
        record = ranked.record
        return cls(
            name=record.name,
            country=record.country,
            population=record.population,
            latitude=record.lat,
            longitude=record.lng,
            driving_distance_km=round(ranked.driving_distance_km, 1),
        )


class NearbyResponse(BaseModel):
    """Nearby cities for one free-text location."""

    location: str
    latitude: float
    longitude: float
    radius_km: float
    cities: list[NearbyCity]
    summary: str
