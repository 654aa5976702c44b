"""Great-circle helpers for radius searches."""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, degrees, radians, sin, sqrt

from domain.common import GeoPoint

EARTH_MEAN_RADIUS_KM = 6371.0088
BOX_MARGIN = 1.01


def haversine_km(origin: GeoPoint, destination: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1 = radians(origin.latitude)
    lat2 = radians(destination.latitude)
    delta_lat = lat2 - lat1
    delta_lon = radians(destination.longitude - origin.longitude)

    a = sin(delta_lat / 2.0) ** 2 + cos(lat1) * cos(lat2) * sin(delta_lon / 2.0) ** 2
    return 2.0 * EARTH_MEAN_RADIUS_KM * asin(min(1.0, sqrt(a)))


@dataclass(frozen=True)
class BoundingBox:
    """Coarse lat/lon window enclosing a search circle.

    `min_longitude`/`max_longitude` are None when the circle reaches a pole or
    crosses the antimeridian; callers then skip the longitude filter.
    """

    min_latitude: float
    max_latitude: float
    min_longitude: float | None
    max_longitude: float | None


def bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    if radius_km < 0.0:
        raise ValueError(f"radius_km must be >= 0, got {radius_km}")

    angular_radius = radius_km / EARTH_MEAN_RADIUS_KM
    lat_delta = degrees(angular_radius) * BOX_MARGIN
    min_latitude = center.latitude - lat_delta
    max_latitude = center.latitude + lat_delta
    if min_latitude <= -90.0 or max_latitude >= 90.0:
        return BoundingBox(max(min_latitude, -90.0), min(max_latitude, 90.0), None, None)

    # Widest longitude reached by the circle, at the latitude of its tangent meridians.
    ratio = sin(angular_radius) / cos(radians(center.latitude))
    if ratio >= 1.0:
        return BoundingBox(min_latitude, max_latitude, None, None)

    lon_delta = degrees(asin(ratio)) * BOX_MARGIN
    min_longitude = center.longitude - lon_delta
    max_longitude = center.longitude + lon_delta
    if min_longitude < -180.0 or max_longitude > 180.0:
        return BoundingBox(min_latitude, max_latitude, None, None)

    return BoundingBox(min_latitude, max_latitude, min_longitude, max_longitude)

