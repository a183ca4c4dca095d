"""
Geographic utilities for SafeWatch.

Distance calculation and coordinate validation used when filtering
seismic events against the monitoring radius.
"""

import math


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in kilometres.

    Args:
        lat1: latitude of the first point
        lon1: longitude of the first point
        lat2: latitude of the second point
        lon2: longitude of the second point

    Returns:
        Distance in kilometres.
    """
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.asin(math.sqrt(a))

    # mean earth radius
    r = 6371

    return c * r


def validate_coordinates(lat: float, lon: float) -> bool:
    """Return True when lat/lon are inside the WGS84 range."""
    return -90 <= lat <= 90 and -180 <= lon <= 180
