"""
Distance filter for geocoded places: drops results too far from the destination.
Geocoders happily match "Le Jules Verne" in the wrong country; anything beyond
max_km from the trip's anchor point is treated as a mismatch.
"""
import logging
from typing import Sequence

from tripmap.data.geo import Coordinates, haversine_distance_km
from tripmap.places.models import GeocodedPlace

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE_KM = 100.0


def filter_by_distance(
    places: Sequence[GeocodedPlace],
    anchor: Coordinates,
    max_km: float = DEFAULT_MAX_DISTANCE_KM,
) -> list[GeocodedPlace]:
    """Return places within max_km of anchor (inclusive), in their original order."""
    kept: list[GeocodedPlace] = []
    for place in places:
        distance = haversine_distance_km(anchor.lat, anchor.lon, place.latitude, place.longitude)
        logger.debug("telemetry place_distance name=%s distance_km=%.2f", place.name, distance)
        if distance <= max_km:
            kept.append(place)
        else:
            logger.info(
                "telemetry place_dropped_too_far name=%s distance_km=%.2f max_km=%s",
                place.name,
                distance,
                max_km,
            )
    return kept
