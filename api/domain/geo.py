# SPDX-License-Identifier: Apache-2.0

"""
Great-circle distance on a spherical Earth.
"""

from math import asin, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def distance_km(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """
    Haversine distance in kilometers between two points in decimal degrees.

    Coordinates must already be range-checked; this function does not
    validate them.
    """
    dlat = radians(lat_b - lat_a)
    dlon = radians(lon_b - lon_a)

    h = sin(dlat / 2) ** 2 + cos(radians(lat_a)) * cos(radians(lat_b)) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))

    return 2 * EARTH_RADIUS_KM * asin(sqrt(h))
