# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Pydantic models.
"""

import pytest
from datetime import datetime
from pydantic import ValidationError

from models.entities import GeoPoint, HelpRequest, RequestStats, UserContext
from models.enums import RequestStatus
from models.requests import CreateHelpRequestRequest, NearbyQueryRequest, DEFAULT_RADIUS_KM


class TestGeoPoint:
    """Test coordinate validation."""

    def test_valid_point(self):
        point = GeoPoint(lat=13.0827, lon=80.2707)
        assert point.lat == 13.0827

    @pytest.mark.parametrize("lat,lon", [(90.1, 0), (-90.1, 0), (0, 180.1), (0, -180.1)])
    def test_out_of_range(self, lat, lon):
        """Test out-of-range coordinates are rejected."""
        with pytest.raises(ValidationError):
            GeoPoint(lat=lat, lon=lon)

    def test_boolean_rejected(self):
        """Test booleans are not accepted as coordinates."""
        with pytest.raises(ValidationError):
            GeoPoint(lat=True, lon=0)


class TestHelpRequestModel:
    """Test HelpRequest model validation."""

    def test_defaults(self):
        """Test a new request starts active without a helper."""
        request = HelpRequest(
            requester_name="  Priya  ",
            member_count=3,
            location=GeoPoint(lat=13.08, lon=80.27),
            owner_id="owner-1"
        )

        assert request.status == "active"
        assert request.helper_id is None
        assert request.requester_name == "Priya"
        assert isinstance(request.created_at, datetime)
        assert request.created_at.tzinfo is not None

    def test_from_document_and_back(self, sample_document):
        """Test camelCase documents load and serialize with the same keys."""
        request = HelpRequest.from_document(sample_document)

        assert request.owner_id == "owner-1"
        assert request.member_count == 4
        assert request.to_document() == sample_document

    def test_in_progress_requires_helper(self, sample_document):
        """Test in-progress without a helper is invalid."""
        sample_document["status"] = "in-progress"

        with pytest.raises(ValidationError):
            HelpRequest.from_document(sample_document)

    def test_active_must_not_have_helper(self, sample_document):
        """Test an active request cannot carry a helper."""
        sample_document["helperId"] = "helper-1"

        with pytest.raises(ValidationError):
            HelpRequest.from_document(sample_document)

    def test_unknown_status(self, sample_document):
        """Test unknown status values are rejected."""
        sample_document["status"] = "archived"

        with pytest.raises(ValidationError):
            HelpRequest.from_document(sample_document)

    @pytest.mark.parametrize("status,terminal", [
        (RequestStatus.ACTIVE, False),
        (RequestStatus.CANCELLED, True),
    ])
    def test_is_terminal(self, sample_document, status, terminal):
        sample_document["status"] = status.value
        assert HelpRequest.from_document(sample_document).is_terminal() is terminal

    def test_is_owned_by(self, sample_document):
        request = HelpRequest.from_document(sample_document)

        assert request.is_owned_by("owner-1")
        assert not request.is_owned_by("helper-1")


class TestCreateHelpRequestRequest:
    """Test create payload validation."""

    def test_documented_names(self):
        data = CreateHelpRequestRequest(name="Priya", members=2, lat=13.0, lon=80.0)

        assert data.description == ""
        assert data.address == ""
        assert data.owner_contact is None

    def test_original_client_names(self):
        """Test the capitalised names of the original client."""
        data = CreateHelpRequestRequest.model_validate({
            "Name": "Priya", "Members": 2, "Desc": "Flooded", "Address": "Egmore",
            "Lat": 13.0, "Lon": 80.0, "userEmail": "p@example.org"
        })

        assert data.name == "Priya"
        assert data.members == 2
        assert data.description == "Flooded"
        assert data.owner_contact == "p@example.org"

    def test_numeric_strings_are_coerced(self):
        """Test numeric strings from form posts are accepted."""
        data = CreateHelpRequestRequest.model_validate({"name": "Priya", "members": "3", "lat": "13.0", "lon": "80.0"})

        assert data.members == 3
        assert data.lat == 13.0

    def test_members_must_be_positive(self):
        with pytest.raises(ValidationError):
            CreateHelpRequestRequest(name="Priya", members=0, lat=13.0, lon=80.0)


class TestNearbyQueryRequest:
    """Test radius query validation."""

    def test_default_radius(self):
        assert NearbyQueryRequest(lat=13.0, lon=80.0).radius_km == DEFAULT_RADIUS_KM

    @pytest.mark.parametrize("key", ["radius", "radiusKm", "radius_km"])
    def test_radius_aliases(self, key):
        assert NearbyQueryRequest.model_validate({"lat": 13.0, "lon": 80.0, key: 5}).radius_km == 5.0

    @pytest.mark.parametrize("radius", [0, -1, None, float("inf")])
    def test_invalid_radius(self, radius):
        with pytest.raises(ValidationError):
            NearbyQueryRequest.model_validate({"lat": 13.0, "lon": 80.0, "radius": radius})


class TestSupportModels:

    def test_stats_serialize_camel_case(self):
        stats = RequestStats(total=3, active=2, in_progress=1, completed=0, cancelled=0)

        assert stats.model_dump(by_alias=True)["inProgress"] == 1

    def test_user_context_requires_id(self):
        with pytest.raises(ValidationError):
            UserContext(user_id="")
