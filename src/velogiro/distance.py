"""Great-circle distance between GPS coordinates.

Haversine on a spherical Earth is accurate enough for cycling tracks
(< 0.5% error against the WGS-84 ellipsoid).
"""

import math

# Earth's mean radius in meters
EARTH_RADIUS_M = 6_371_000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points using Haversine formula.

    Args:
        lat1, lon1: First point coordinates in degrees
        lat2, lon2: Second point coordinates in degrees

    Returns:
        Distance in meters. NaN coordinates yield NaN.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    if a > 1.0:  # rounding near antipodal points
        a = 1.0
    c = 2 * math.asin(math.sqrt(a))

    return EARTH_RADIUS_M * c
