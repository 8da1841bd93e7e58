"""Geographic helpers."""

from __future__ import annotations

from geopy.distance import geodesic


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Geodesic distance between two coordinates in kilometres."""
    return geodesic((lat1, lng1), (lat2, lng2)).km
