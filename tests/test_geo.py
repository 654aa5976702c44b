from __future__ import annotations

from math import asin, atan2, cos, degrees, radians, sin

import pytest

from domain.common import GeoPoint
from domain.matchmaking.geo import EARTH_MEAN_RADIUS_KM, bounding_box, haversine_km


def test_haversine_zero_for_same_point() -> None:
    point = GeoPoint(latitude=40.7128, longitude=-74.006)
    assert haversine_km(point, point) == pytest.approx(0.0)


def test_haversine_known_city_distance() -> None:
    london = GeoPoint(latitude=51.5074, longitude=-0.1278)
    paris = GeoPoint(latitude=48.8566, longitude=2.3522)
    assert haversine_km(london, paris) == pytest.approx(343.5, abs=1.0)
    assert haversine_km(paris, london) == pytest.approx(haversine_km(london, paris))


def test_bounding_box_contains_circle_edge() -> None:
    center = GeoPoint(latitude=12.97, longitude=77.59)
    box = bounding_box(center, 10.0)

    north = GeoPoint(latitude=center.latitude + 10.0 / 111.195, longitude=center.longitude)
    assert box.min_latitude < center.latitude < box.max_latitude
    assert north.latitude <= box.max_latitude
    assert box.min_longitude is not None and box.max_longitude is not None
    assert box.min_longitude < center.longitude < box.max_longitude


def test_bounding_box_drops_longitude_near_pole() -> None:
    box = bounding_box(GeoPoint(latitude=89.99, longitude=10.0), 50.0)
    assert box.max_latitude == 90.0
    assert box.min_longitude is None
    assert box.max_longitude is None


def test_bounding_box_drops_longitude_across_antimeridian() -> None:
    box = bounding_box(GeoPoint(latitude=-17.7, longitude=179.99), 20.0)
    assert box.min_longitude is None
    assert box.max_longitude is None


def test_bounding_box_rejects_negative_radius() -> None:
    with pytest.raises(ValueError, match="radius_km"):
        bounding_box(GeoPoint(latitude=0.0, longitude=0.0), -1.0)


def test_geo_point_validates_ranges() -> None:
    with pytest.raises(ValueError, match="latitude"):
        GeoPoint(latitude=91.0, longitude=0.0)
    with pytest.raises(ValueError, match="longitude"):
        GeoPoint(latitude=0.0, longitude=-180.5)


def _destination(center: GeoPoint, distance_km: float, bearing_degrees: float) -> GeoPoint:
    angular = distance_km / EARTH_MEAN_RADIUS_KM
    lat1 = radians(center.latitude)
    lon1 = radians(center.longitude)
    bearing = radians(bearing_degrees)
    lat2 = asin(sin(lat1) * cos(angular) + cos(lat1) * sin(angular) * cos(bearing))
    lon2 = lon1 + atan2(sin(bearing) * sin(angular) * cos(lat1), cos(angular) - sin(lat1) * sin(lat2))
    return GeoPoint(latitude=degrees(lat2), longitude=(degrees(lon2) + 540.0) % 360.0 - 180.0)


@pytest.mark.parametrize(
    ("latitude", "longitude", "radius_km"),
    [(89.0, 0.0, 100.0), (70.0, 25.0, 100.0), (60.0, 10.0, 50.0), (0.0, 0.0, 100.0), (-75.0, 120.0, 80.0)],
)
def test_bounding_box_encloses_every_point_on_the_circle(
    latitude: float,
    longitude: float,
    radius_km: float,
) -> None:
    center = GeoPoint(latitude=latitude, longitude=longitude)
    box = bounding_box(center, radius_km)

    outside = []
    for bearing in range(0, 360, 5):
        point = _destination(center, radius_km * 0.99, float(bearing))
        assert haversine_km(center, point) == pytest.approx(radius_km * 0.99, rel=1e-6)
        inside_latitude = box.min_latitude <= point.latitude <= box.max_latitude
        inside_longitude = box.min_longitude is None or (
            box.min_longitude <= point.longitude <= box.max_longitude  # type: ignore[operator]
        )
        if not (inside_latitude and inside_longitude):
            outside.append((bearing, round(point.longitude, 2)))
    assert outside == []


def test_bounding_box_longitude_widens_at_high_latitude() -> None:
    box = bounding_box(GeoPoint(latitude=89.0, longitude=0.0), 100.0)
    assert box.max_longitude is not None
    assert box.max_longitude > 61.79
