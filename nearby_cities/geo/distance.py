"""Great-circle distance using the Haversine formula."""

import math

from nearby_cities.models.city import CityRecord, Coordinate

# Mean Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0


def distance_km(a: Coordinate | CityRecord, b: Coordinate | CityRecord) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        a: First point (degrees)
        b: Second point (degrees)

    Returns:
        Distance in kilometers, between 0 and pi * EARTH_RADIUS_KM
    """
    lat_a = math.radians(a.lat)
    lat_b = math.radians(b.lat)
    delta_lat = math.radians(b.lat - a.lat)
    delta_lng = math.radians(b.lng - a.lng)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat_a) * math.cos(lat_b) * math.sin(delta_lng / 2) ** 2
    )
    # Rounding can push h just outside [0, 1] for coincident or antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_KM * c
