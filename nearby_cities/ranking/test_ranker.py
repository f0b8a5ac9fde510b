import pytest

from nearby_cities.geo.distance import distance_km
from nearby_cities.maps_service.maps import DistanceUnavailableError, ExternalAPIError
from nearby_cities.models.city import CityRecord, Coordinate
from nearby_cities.ranking.ranker import rank_nearby_cities

ORIGIN = Coordinate(lat=0.0, lng=0.0)
KM_PER_DEGREE = 111.19493


def city_at(name: str, km_north: float, population: int = 50000) -> CityRecord:
    return CityRecord(
        name=name,
        lat=km_north / KM_PER_DEGREE,
        lng=0.0,
        country="XX",
        population=population,
    )


class FakeResolver:
    """Returns preset driving distances keyed by destination latitude."""

    def __init__(self, distances: dict[CityRecord, object]):
        self.distances = {(c.lat, c.lng): value for c, value in distances.items()}
        self.calls: list[Coordinate] = []

    def driving_distance_m(self, origin: Coordinate, destination: Coordinate) -> int:
        self.calls.append(destination)
        value = self.distances[(destination.lat, destination.lng)]
        if isinstance(value, Exception):
            raise value
        return value


def test_city_within_both_radii_is_included():
    city = city_at("Near", 50)
    resolver = FakeResolver({city: 60000})

    ranked = rank_nearby_cities(ORIGIN, [city], resolver, radius_km=100)

    assert [item.record for item in ranked] == [city]
    assert ranked[0].driving_distance_m == 60000
    assert ranked[0].driving_distance_km == 60.0


def test_city_beyond_straight_line_radius_never_reaches_resolver():
    city = city_at("Far", 150)
    resolver = FakeResolver({city: 1000})

    assert rank_nearby_cities(ORIGIN, [city], resolver, radius_km=100) == []
    assert resolver.calls == []


def test_driving_detour_beyond_radius_is_excluded():
    city = city_at("Detour", 80)
    resolver = FakeResolver({city: 110000})

    assert rank_nearby_cities(ORIGIN, [city], resolver, radius_km=100) == []
    assert len(resolver.calls) == 1


def test_driving_distance_exactly_at_radius_is_included():
    city = city_at("Edge", 90)
    resolver = FakeResolver({city: 100000})
    assert len(rank_nearby_cities(ORIGIN, [city], resolver, radius_km=100)) == 1


@pytest.mark.parametrize(
    "error", [DistanceUnavailableError("ZERO_RESULTS"), ExternalAPIError("timeout")]
)
def test_resolver_failure_drops_only_that_candidate(error):
    broken = city_at("Broken", 20)
    fine = city_at("Fine", 30)
    resolver = FakeResolver({broken: error, fine: 35000})

    ranked = rank_nearby_cities(ORIGIN, [broken, fine], resolver, radius_km=100)

    assert [item.record.name for item in ranked] == ["Fine"]


def test_sorted_by_driving_distance_not_straight_line():
    a = city_at("A", 10)
    b = city_at("B", 20)
    c = city_at("C", 30)
    resolver = FakeResolver({a: 45000, b: 25000, c: 35000})

    ranked = rank_nearby_cities(ORIGIN, [a, b, c], resolver, radius_km=100)

    assert [item.record.name for item in ranked] == ["B", "C", "A"]


def test_ties_keep_gazetteer_order():
    first = city_at("First", 40)
    second = city_at("Second", 10)
    resolver = FakeResolver({first: 50000, second: 50000})

    ranked = rank_nearby_cities(ORIGIN, [first, second], resolver, radius_km=100)

    assert [item.record.name for item in ranked] == ["First", "Second"]


def test_truncates_to_max_results():
    cities = [city_at(f"City {i}", i + 1) for i in range(10)]
    resolver = FakeResolver({city: 90000 - i * 1000 for i, city in enumerate(cities)})

    ranked = rank_nearby_cities(ORIGIN, cities, resolver, radius_km=100, max_results=3)

    assert [item.record.name for item in ranked] == ["City 9", "City 8", "City 7"]


def test_default_cap_is_one_hundred():
    cities = [city_at(f"City {i}", 0.5 * i) for i in range(120)]
    resolver = FakeResolver({city: 1000 + i for i, city in enumerate(cities)})

    ranked = rank_nearby_cities(ORIGIN, cities, resolver, radius_km=100)

    assert len(ranked) == 100


def test_empty_gazetteer_gives_empty_result():
    assert rank_nearby_cities(ORIGIN, [], FakeResolver({}), radius_km=100) == []


def test_results_respect_both_radii_and_ordering():
    cities = [city_at(f"City {i}", km) for i, km in enumerate([5, 95, 101, 60, 140, 30])]
    driving = [9000, 99000, 1000, 130000, 2000, 45000]
    resolver = FakeResolver(dict(zip(cities, driving)))

    ranked = rank_nearby_cities(ORIGIN, cities, resolver, radius_km=100, max_results=10)

    distances = [item.driving_distance_m for item in ranked]
    assert distances == sorted(distances)
    assert len({item.record.name for item in ranked}) == len(ranked)
    for item in ranked:
        assert distance_km(ORIGIN, item.record) <= 100
        assert item.driving_distance_m <= 100 * 1000
    assert [item.record.name for item in ranked] == ["City 0", "City 5", "City 1"]
