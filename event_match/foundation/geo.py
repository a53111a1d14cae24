"""Great-circle distance between two points on the Earth's surface."""

from __future__ import annotations

from math import asin, cos, radians, sin, sqrt

# Equatorial radius in metres (WGS-84).
EARTH_RADIUS_M = 6378137.0


def great_circle_distance(
    lon1: float,
    lat1: float,
    lon2: float,
    lat2: float,
) -> float:
    """Haversine distance in metres between two (longitude, latitude) points."""
    lon1, lat1, lon2, lat2 = map(radians, [lon1, lat1, lon2, lat2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push a just outside [0, 1].
    return 2 * EARTH_RADIUS_M * asin(sqrt(min(1.0, max(0.0, a))))
