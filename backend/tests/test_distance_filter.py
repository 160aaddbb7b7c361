"""Tests for the destination distance filter."""
from unittest.mock import patch

from tripmap.data.geo import Coordinates, haversine_distance_km
from tripmap.geocoding.filter import DEFAULT_MAX_DISTANCE_KM, filter_by_distance
from tripmap.places.models import GeocodedPlace

EQUATOR = Coordinates(0.0, 0.0)
KM_PER_DEGREE = haversine_distance_km(0.0, 0.0, 1.0, 0.0)


def _place(name: str, lat: float, lon: float) -> GeocodedPlace:
    return GeocodedPlace(name=name, context="", type="landmark", latitude=lat, longitude=lon, address="")


def test_default_threshold_is_100_km():
    assert DEFAULT_MAX_DISTANCE_KM == 100.0


def test_place_at_exactly_max_distance_is_kept():
    place = _place("Edge", 0.9, 0.0)
    with patch("tripmap.geocoding.filter.haversine_distance_km", return_value=100.0):
        assert filter_by_distance([place], EQUATOR, max_km=100.0) == [place]


def test_place_just_beyond_max_distance_is_dropped():
    place = _place("Too far", 100.01 / KM_PER_DEGREE, 0.0)
    assert filter_by_distance([place], EQUATOR, max_km=100.0) == []


def test_boundary_uses_inclusive_comparison():
    place = _place("Somewhere", 0.5, 0.5)
    d = haversine_distance_km(0.0, 0.0, 0.5, 0.5)
    assert filter_by_distance([place], EQUATOR, max_km=d) == [place]
    assert filter_by_distance([place], EQUATOR, max_km=d - 0.01) == []


def test_filter_preserves_order_and_only_removes():
    tokyo = Coordinates(35.6762, 139.6503)
    places = [
        _place("Tokyo Tower", 35.6586, 139.7454),
        _place("Osaka Castle", 34.6873, 135.5262),
        _place("Sukiyabashi Jiro", 35.6717, 139.7638),
        _place("Kamakura Daibutsu", 35.3167, 139.5358),
    ]
    kept = filter_by_distance(places, tokyo)
    assert [p.name for p in kept] == ["Tokyo Tower", "Sukiyabashi Jiro", "Kamakura Daibutsu"]


def test_configurable_threshold():
    tokyo = Coordinates(35.6762, 139.6503)
    places = [_place("Tokyo Tower", 35.6586, 139.7454), _place("Kamakura Daibutsu", 35.3167, 139.5358)]
    kept = filter_by_distance(places, tokyo, max_km=20.0)
    assert [p.name for p in kept] == ["Tokyo Tower"]


def test_empty_input():
    assert filter_by_distance([], EQUATOR) == []
