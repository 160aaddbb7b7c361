"""
Shareable Google Maps URLs for a trip's places (opens Google Maps with the places pre-loaded).
"""
from typing import Protocol, Sequence
from urllib.parse import quote

SEARCH_URL = "https://www.google.com/maps/search/"
DIRECTIONS_URL = "https://www.google.com/maps/dir/"


class MappablePlace(Protocol):
    name: str
    latitude: float | None
    longitude: float | None


def _query(place: MappablePlace) -> str:
    """URL-encoded name, or "lat,lon" when the name is blank."""
    name = (place.name or "").strip()
    if name:
        return quote(name, safe="")
    return f"{place.latitude},{place.longitude}"


def search_url(places: Sequence[MappablePlace]) -> str | None:
    """One pin per place. None when there are no places."""
    if not places:
        return None
    if len(places) == 1:
        return f"{SEARCH_URL}?api=1&query={_query(places[0])}"
    return SEARCH_URL + "/".join(_query(p) for p in places)


def directions_url(places: Sequence[MappablePlace]) -> str | None:
    """Directions through the places in order. None when there are no places."""
    if not places:
        return None
    if len(places) == 1:
        return search_url(places)
    return f"{DIRECTIONS_URL}?api=1&query=" + "+to:".join(_query(p) for p in places)
