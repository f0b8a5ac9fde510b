"""City, coordinate, and ranking models."""

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A latitude/longitude pair in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class CityRecord(BaseModel):
    """One gazetteer entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lng: float
    country: str
    population: int

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class RankedCity(BaseModel):
    """A city that survived both distance filters for one query."""

    model_config = ConfigDict(frozen=True)

    record: CityRecord
    driving_distance_m: int

    @property
    def driving_distance_km(self) -> float:
        return self.driving_distance_m / 1000
