"""Tests for shareable Google Maps URLs."""
from tripmap.places.models import GeocodedPlace
from tripmap.trips.maps_url import directions_url, search_url
from tripmap.trips.models import MapsUrlPlace


def _place(name: str, lat: float = 48.8584, lon: float = 2.2945) -> GeocodedPlace:
    return GeocodedPlace(name=name, latitude=lat, longitude=lon)


def test_no_places_no_url():
    assert search_url([]) is None
    assert directions_url([]) is None


def test_single_place_search_by_name():
    assert search_url([_place("Eiffel Tower")]) == "https://www.google.com/maps/search/?api=1&query=Eiffel%20Tower"


def test_single_place_without_name_uses_coordinates():
    place = MapsUrlPlace(name="", latitude=48.8584, longitude=2.2945)
    assert search_url([place]) == "https://www.google.com/maps/search/?api=1&query=48.8584,2.2945"


def test_multiple_places_search_path():
    url = search_url([_place("Eiffel Tower"), _place("Le Jules Verne"), _place("Café de Flore")])
    assert url == "https://www.google.com/maps/search/Eiffel%20Tower/Le%20Jules%20Verne/Caf%C3%A9%20de%20Flore"


def test_names_with_slashes_are_encoded():
    url = search_url([_place("AC/DC Bar"), _place("Louvre")])
    assert url == "https://www.google.com/maps/search/AC%2FDC%20Bar/Louvre"


def test_directions_through_places_in_order():
    url = directions_url([_place("Louvre"), _place("Musée d'Orsay")])
    assert url == "https://www.google.com/maps/dir/?api=1&query=Louvre+to:Mus%C3%A9e%20d%27Orsay"


def test_single_place_directions_is_a_search():
    assert directions_url([_place("Louvre")]) == search_url([_place("Louvre")])
