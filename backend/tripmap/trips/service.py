"""
Trip map pipeline: notes -> extraction -> batch geocoding -> highlighting + Maps URL.
Extraction errors propagate (nothing useful can be built without places);
geocoding failures only shrink the place list.
"""
import html
import logging
from typing import Protocol

from tripmap.geocoding.filter import DEFAULT_MAX_DISTANCE_KM
from tripmap.geocoding.pipeline import DEFAULT_MAX_WORKERS, Resolver, geocode_all
from tripmap.highlight.matcher import highlight, targets_for
from tripmap.monitoring.metrics import record_trip
from tripmap.places.models import UNKNOWN_DESTINATION, ExtractionResult, TripMap
from tripmap.trips.maps_url import search_url

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    def extract(self, text: str) -> ExtractionResult: ...


def build_trip_map(
    text: str,
    extractor: Extractor,
    resolver: Resolver,
    *,
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> TripMap:
    extraction = extractor.extract(text)
    destination = extraction.destination
    places = geocode_all(
        extraction.places,
        None if destination == UNKNOWN_DESTINATION else destination,
        resolver,
        max_distance_km=max_distance_km,
        max_workers=max_workers,
    )
    unresolved = len(extraction.places) - len(places)
    record_trip(resolved=len(places), unresolved=unresolved)
    if unresolved:
        logger.info(
            "telemetry trip_places_unresolved unresolved=%s extracted=%s",
            unresolved,
            len(extraction.places),
        )
    return TripMap(
        destination=extraction.destination,
        places=places,
        unresolved_count=unresolved,
        highlighted_html=highlight(text, targets_for(places)) if places else html.escape(text, quote=False),
        google_maps_url=search_url(places),
    )
