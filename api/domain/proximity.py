# SPDX-License-Identifier: Apache-2.0

"""
Proximity filtering and ranking of open help requests.

Pure functions: they work on an already-fetched snapshot of candidates and
never touch the store.
"""

from math import isfinite
from typing import Iterable, List, Tuple

from models.entities import HelpRequest
from models.enums import TERMINAL_STATUSES
from models.requests import DEFAULT_RADIUS_KM
from .errors import ValidationException, field_error
from .geo import distance_km


def validate_radius(radius_km) -> float:
    """Return the radius as a float, or raise ValidationException."""
    if isinstance(radius_km, bool) or not isinstance(radius_km, (int, float)):
        raise ValidationException(
            "Radius must be a number",
            [field_error("radius", "Radius must be a number", "float_type", None)]
        )

    if not isfinite(radius_km) or radius_km <= 0:
        raise ValidationException(
            "Radius must be a positive number",
            [field_error("radius", "Radius must be greater than 0", "greater_than", radius_km)]
        )

    return float(radius_km)


def rank_nearby(
    helper_lat: float,
    helper_lon: float,
    radius_km: float,
    candidates: Iterable[HelpRequest]
) -> List[Tuple[HelpRequest, float]]:
    """
    Requests within ``radius_km`` of the helper, nearest first, with distances.

    Args:
        helper_lat: Helper latitude
        helper_lon: Helper longitude
        radius_km: Inclusive search radius in kilometers
        candidates: Requests to consider

    Returns:
        List of (request, distance_km) pairs ordered by distance, then by
        creation time (oldest first), then by id
    """
    radius_km = validate_radius(radius_km)

    matches = []
    for candidate in candidates:
        # Terminal requests are never actionable, whatever the caller fetched
        if candidate.status in TERMINAL_STATUSES:
            continue

        distance = distance_km(helper_lat, helper_lon, candidate.location.lat, candidate.location.lon)
        if distance <= radius_km:
            matches.append((candidate, distance))

    matches.sort(key=lambda match: (match[1], match[0].created_at, match[0].id))
    return matches


def nearby(
    helper_lat: float,
    helper_lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
    candidates: Iterable[HelpRequest] = ()
) -> List[HelpRequest]:
    """Requests within ``radius_km`` of the helper, nearest first."""
    return [request for request, _ in rank_nearby(helper_lat, helper_lon, radius_km, candidates)]
