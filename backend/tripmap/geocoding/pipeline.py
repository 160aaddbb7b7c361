"""
Batch geocoding: extracted places -> ordered, distance-filtered geocoded places.

The destination is resolved first (alone) to get a bias point; each place is then
resolved independently on a thread pool. Failed places are dropped, never fatal.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol, Sequence

from tripmap.data.geo import Coordinates
from tripmap.errors import GeocodeError
from tripmap.geocoding.filter import DEFAULT_MAX_DISTANCE_KM, filter_by_distance
from tripmap.places.models import ExtractedPlace, GeocodedLocation, GeocodedPlace

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class Resolver(Protocol):
    def resolve(
        self,
        query: str,
        destination: str | None = None,
        bias: Coordinates | None = None,
    ) -> GeocodedLocation: ...

    def resolve_point(self, query: str) -> Coordinates | None: ...


def _geocode_place(
    resolver: Resolver,
    place: ExtractedPlace,
    destination: str | None,
    bias: Coordinates | None,
) -> GeocodedPlace | None:
    name = place.name.strip()
    if not name:
        return None
    try:
        location = resolver.resolve(name, destination=destination, bias=bias)
    except GeocodeError as e:
        logger.info("telemetry place_unresolved name=%s outcome=%s", name, e.outcome.value)
        return None
    return GeocodedPlace.from_location(place, location)


def geocode_all(
    places: Sequence[ExtractedPlace],
    destination: str | None,
    resolver: Resolver,
    *,
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[GeocodedPlace]:
    """
    Geocode places in input order. Unresolvable places are dropped; when the
    destination resolves, places farther than max_distance_km from it are dropped too.
    """
    if not places:
        return []

    start = time.perf_counter()
    destination = (destination or "").strip() or None
    bias = resolver.resolve_point(destination) if destination else None
    logger.info(
        "telemetry geocode_batch_started count=%s destination=%s biased=%s",
        len(places),
        destination,
        bias is not None,
    )

    workers = max(1, min(max_workers, len(places)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # map() yields in submission order regardless of completion order
        results = list(pool.map(lambda p: _geocode_place(resolver, p, destination, bias), places))

    geocoded = [r for r in results if r is not None]
    if bias is not None and geocoded:
        geocoded = filter_by_distance(geocoded, bias, max_km=max_distance_km)

    logger.info(
        "telemetry geocode_batch_finished requested=%s resolved=%s duration_ms=%.1f",
        len(places),
        len(geocoded),
        (time.perf_counter() - start) * 1000,
    )
    return geocoded
