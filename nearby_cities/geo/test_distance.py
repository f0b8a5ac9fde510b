import math

import pytest

from nearby_cities.geo.distance import EARTH_RADIUS_KM, distance_km
from nearby_cities.models.city import CityRecord, Coordinate

PARIS = Coordinate(lat=48.8566, lng=2.3522)
LYON = Coordinate(lat=45.7640, lng=4.8357)


def test_same_point_is_zero():
    assert distance_km(PARIS, PARIS) == 0


def test_paris_lyon():
    assert 380 < distance_km(PARIS, LYON) < 420


def test_symmetric():
    a = Coordinate(lat=-33.8688, lng=151.2093)
    b = Coordinate(lat=40.7128, lng=-74.0060)
    assert distance_km(a, b) == distance_km(b, a)


def test_one_degree_of_latitude():
    distance = distance_km(Coordinate(lat=0, lng=0), Coordinate(lat=1, lng=0))
    assert distance == pytest.approx(EARTH_RADIUS_KM * math.pi / 180)


@pytest.mark.parametrize(
    "a, b",
    [
        (Coordinate(lat=0, lng=0), Coordinate(lat=0, lng=180)),
        (Coordinate(lat=90, lng=0), Coordinate(lat=-90, lng=0)),
        (Coordinate(lat=45, lng=-120), Coordinate(lat=-45, lng=60)),
    ],
)
def test_antipodal_points_do_not_exceed_half_circumference(a, b):
    distance = distance_km(a, b)
    assert distance <= math.pi * EARTH_RADIUS_KM + 1e-9
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


def test_accepts_city_records():
    lyon = CityRecord(name="Lyon", lat=45.7640, lng=4.8357, country="FR", population=522969)
    assert distance_km(PARIS, lyon) == distance_km(PARIS, LYON)
