# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for nearby request filtering and ranking.
"""

import pytest
from datetime import datetime, timedelta, timezone

from domain.errors import ValidationException
from domain.geo import distance_km
from domain.proximity import nearby, rank_nearby, validate_radius
from models.entities import GeoPoint, HelpRequest
from models.enums import RequestStatus

CHENNAI = (13.0827, 80.2707)
BANGALORE = (12.9716, 77.5946)
HELPER_NEAR_CHENNAI = (13.05, 80.25)

BASE_TIME = datetime(2024, 12, 1, 8, 0, tzinfo=timezone.utc)


def make_request(lat, lon, status=RequestStatus.ACTIVE, minutes=0, request_id=None, **kwargs):
    """Build a help request at the given position."""
    helper_id = "helper-9" if status in (RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED) else None
    data = dict(
        requester_name="Test Requester",
        member_count=1,
        location=GeoPoint(lat=lat, lon=lon),
        owner_id="owner-1",
        status=status,
        helper_id=helper_id,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        updated_at=BASE_TIME + timedelta(minutes=minutes)
    )
    if request_id:
        data["id"] = request_id
    data.update(kwargs)
    return HelpRequest(**data)


class TestValidateRadius:
    """Test radius validation."""

    @pytest.mark.parametrize("radius", [0, -1, -0.5, float("inf"), float("nan")])
    def test_rejects_non_positive_or_non_finite(self, radius):
        """Test invalid radius values are rejected."""
        with pytest.raises(ValidationException) as exc_info:
            validate_radius(radius)

        assert exc_info.value.validation_errors[0]["field"] == "radius"

    @pytest.mark.parametrize("radius", [None, "10", True])
    def test_rejects_non_numbers(self, radius):
        """Test non-numeric radius values are rejected."""
        with pytest.raises(ValidationException):
            validate_radius(radius)

    def test_accepts_int(self):
        """Test integer radius is converted to float."""
        assert validate_radius(5) == 5.0


class TestRankNearby:
    """Test proximity ranking."""

    def test_includes_close_and_excludes_far(self):
        """Test the Chennai request is found and the Bangalore one is not."""
        chennai = make_request(*CHENNAI)
        bangalore = make_request(*BANGALORE, minutes=1)

        matches = rank_nearby(*HELPER_NEAR_CHENNAI, 50, [chennai, bangalore])

        assert [request.id for request, _ in matches] == [chennai.id]
        assert 4.0 < matches[0][1] < 4.6

    def test_never_exceeds_radius(self):
        """Test every returned distance is within the radius."""
        candidates = [make_request(13.0 + i * 0.05, 80.2, minutes=i) for i in range(20)]

        matches = rank_nearby(13.0, 80.2, 25.0, candidates)

        assert matches
        assert all(distance <= 25.0 for _, distance in matches)
        assert len(matches) < len(candidates)

    def test_sorted_by_distance(self):
        """Test results are ordered nearest first."""
        far = make_request(13.20, 80.27, minutes=0)
        near = make_request(13.06, 80.26, minutes=1)
        middle = make_request(13.12, 80.27, minutes=2)

        matches = rank_nearby(*HELPER_NEAR_CHENNAI, 50, [far, near, middle])
        distances = [distance for _, distance in matches]

        assert [request.id for request, _ in matches] == [near.id, middle.id, far.id]
        assert distances == sorted(distances)

    def test_ties_broken_by_creation_time_then_id(self):
        """Test equidistant requests are ordered oldest first, then by id."""
        newer = make_request(*CHENNAI, minutes=10, request_id="b" * 24)
        older = make_request(*CHENNAI, minutes=0, request_id="c" * 24)
        same_time = make_request(*CHENNAI, minutes=0, request_id="a" * 24)

        matches = rank_nearby(*HELPER_NEAR_CHENNAI, 50, [newer, older, same_time])

        assert [request.id for request, _ in matches] == ["a" * 24, "c" * 24, "b" * 24]

    def test_excludes_terminal_requests(self):
        """Test completed and cancelled requests are never returned."""
        active = make_request(*CHENNAI)
        claimed = make_request(*CHENNAI, status=RequestStatus.IN_PROGRESS, minutes=1)
        completed = make_request(*CHENNAI, status=RequestStatus.COMPLETED, minutes=2)
        cancelled = make_request(*CHENNAI, status=RequestStatus.CANCELLED, minutes=3)

        matches = rank_nearby(*HELPER_NEAR_CHENNAI, 50, [active, claimed, completed, cancelled])

        assert [request.id for request, _ in matches] == [active.id, claimed.id]

    def test_boundary_is_inclusive(self):
        """Test a request exactly on the radius is included."""
        request = make_request(*CHENNAI)
        radius = distance_km(*HELPER_NEAR_CHENNAI, *CHENNAI)

        assert rank_nearby(*HELPER_NEAR_CHENNAI, radius, [request])

    def test_empty_candidates(self):
        """Test an empty snapshot yields no matches."""
        assert rank_nearby(*HELPER_NEAR_CHENNAI, 50, []) == []

    def test_invalid_radius(self):
        """Test ranking validates the radius."""
        with pytest.raises(ValidationException):
            rank_nearby(*HELPER_NEAR_CHENNAI, 0, [make_request(*CHENNAI)])


class TestNearby:
    """Test the request-only convenience wrapper."""

    def test_default_radius(self):
        """Test the default 50 km radius applies when omitted."""
        close = make_request(*CHENNAI)
        far = make_request(*BANGALORE)

        assert nearby(*HELPER_NEAR_CHENNAI, candidates=[close, far]) == [close]
