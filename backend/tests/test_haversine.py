"""Tests for Haversine distance helper."""
import math

from tripmap.data.geo import EARTH_RADIUS_KM, Coordinates, distance_between_km, haversine_distance_km


def test_same_point_zero_distance():
    assert haversine_distance_km(35.6762, 139.6503, 35.6762, 139.6503) == 0.0


def test_one_degree_longitude_at_equator():
    d = haversine_distance_km(0.0, 0.0, 0.0, 1.0)
    assert abs(d - 111.19) < 0.01


def test_antipodal_roughly_half_circumference():
    d = haversine_distance_km(0.0, 0.0, 0.0, 180.0)
    expected = math.pi * EARTH_RADIUS_KM
    assert abs(d - expected) < 1.0


def test_known_distance_paris_london():
    # Notre-Dame to Westminster ~ 340 km
    d = haversine_distance_km(48.8530, 2.3499, 51.4995, -0.1248)
    assert 330.0 < d < 350.0


def test_symmetry():
    d1 = haversine_distance_km(35.6586, 139.7454, 34.6873, 135.5262)
    d2 = haversine_distance_km(34.6873, 135.5262, 35.6586, 139.7454)
    assert d1 == d2


def test_distance_between_coordinates():
    tokyo = Coordinates(35.6762, 139.6503)
    tower = Coordinates(lat=35.6586, lon=139.7454)
    assert distance_between_km(tokyo, tower) == haversine_distance_km(35.6762, 139.6503, 35.6586, 139.7454)
    assert distance_between_km(tokyo, tokyo) == 0.0
