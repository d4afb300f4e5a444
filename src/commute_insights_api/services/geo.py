"""Great-circle distance helpers."""

from __future__ import annotations

import math

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometers between two points in decimal degrees.

    Inputs are not range-checked.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push ``a`` past 1 for near-antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return distance_km(a.lat, a.lng, b.lat, b.lng)


__all__ = ["EARTH_RADIUS_KM", "distance_between", "distance_km"]
