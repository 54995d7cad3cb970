# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from bson import ObjectId

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['STORE_BACKEND'] = 'memory'
os.environ['MONGODB_DATABASE'] = 'crisis_connect_test'
os.environ['BASE_URL'] = 'http://localhost:5000'

from models.entities import UserContext
from services.memory_store import InMemoryRequestStore
from services.requests import HelpRequestService

CHENNAI = (13.0827, 80.2707)
BANGALORE = (12.9716, 77.5946)
HELPER_NEAR_CHENNAI = (13.05, 80.25)


@pytest.fixture
def store():
    """Empty in-memory request store."""
    return InMemoryRequestStore()


@pytest.fixture
def service(store):
    """Lifecycle service over the in-memory store."""
    return HelpRequestService(store)


@pytest.fixture
def owner_context():
    """Identity of the requester who owns help requests."""
    return UserContext(user_id="owner-1", email="owner@example.org")


@pytest.fixture
def helper_context():
    """Identity of a helper."""
    return UserContext(user_id="helper-1", email="helper@example.org")


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """Create payload for a request in central Chennai."""
    return {
        "name": "Priya Raman",
        "members": 4,
        "description": "Water entering the house, two children",
        "address": "Egmore, Chennai",
        "lat": CHENNAI[0],
        "lon": CHENNAI[1]
    }


@pytest.fixture
def bangalore_payload() -> Dict[str, Any]:
    """Create payload for a request in Bangalore."""
    return {
        "name": "Kiran Rao",
        "members": 2,
        "description": "Need food supplies",
        "address": "MG Road, Bangalore",
        "lat": BANGALORE[0],
        "lon": BANGALORE[1]
    }


@pytest.fixture
def sample_document() -> Dict[str, Any]:
    """Stored help request document as returned by a store gateway."""
    created_at = datetime(2024, 12, 1, 10, 30, tzinfo=timezone.utc)
    return {
        "id": str(ObjectId()),
        "requesterName": "Priya Raman",
        "memberCount": 4,
        "description": "Water entering the house, two children",
        "address": "Egmore, Chennai",
        "location": {"lat": CHENNAI[0], "lon": CHENNAI[1]},
        "ownerId": "owner-1",
        "ownerContact": "owner@example.org",
        "status": "active",
        "helperId": None,
        "createdAt": created_at,
        "updatedAt": created_at + timedelta(minutes=5)
    }


@pytest.fixture
def app(store):
    """Flask application wired to the in-memory store."""
    from app import create_app

    app = create_app({'TESTING': True, 'OTEL_ENABLED': False}, store=store)
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def owner_headers():
    """Identity headers for the requester."""
    return {"X-User-Id": "owner-1", "X-User-Email": "owner@example.org"}


@pytest.fixture
def helper_headers():
    """Identity headers for a helper."""
    return {"X-User-Id": "helper-1", "X-User-Email": "helper@example.org"}


@pytest.fixture
def other_headers():
    """Identity headers for an unrelated user."""
    return {"X-User-Id": "stranger-1"}
