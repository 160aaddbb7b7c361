"""
Haversine distance between geocoded places and a trip's destination.
"""
import math
from typing import NamedTuple

# Earth radius in km (WGS84 approximate)
EARTH_RADIUS_KM = 6371.0


class Coordinates(NamedTuple):
    """A WGS84 point in decimal degrees."""

    lat: float
    lon: float


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Return great-circle distance between two points in kilometers.
    Arguments in degrees.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between_km(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance between two Coordinates."""
    return haversine_distance_km(a.lat, a.lon, b.lat, b.lon)
