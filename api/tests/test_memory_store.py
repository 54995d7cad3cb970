# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the in-memory store gateway.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from bson import ObjectId

from services.store import UpdateOutcome


def make_document(**overrides):
    document = {
        "requesterName": "Priya",
        "memberCount": 2,
        "location": {"lat": 13.0827, "lon": 80.2707},
        "ownerId": "owner-1",
        "status": "active",
        "helperId": None
    }
    document.update(overrides)
    return document


class TestInMemoryRequestStore:
    """Test in-memory store behaviour."""

    def test_insert_and_find(self, store):
        """Test inserted documents can be read back by id."""
        request_id = store.insert(make_document(id="ignored"))

        document = store.find_by_id(request_id)

        assert ObjectId.is_valid(request_id)
        assert document["id"] == request_id
        assert document["createdAt"] == document["updatedAt"]

    def test_returned_documents_are_copies(self, store):
        """Test mutating a returned document does not change the store."""
        request_id = store.insert(make_document())

        store.find_by_id(request_id)["location"]["lat"] = 0.0

        assert store.find_by_id(request_id)["location"]["lat"] == 13.0827

    def test_listing_order_and_filters(self, store):
        """Test listings are oldest first and filter correctly."""
        first = store.insert(make_document())
        second = store.insert(make_document(ownerId="owner-2", status="completed", helperId="helper-1"))
        third = store.insert(make_document(status="cancelled"))

        assert [d["id"] for d in store.find_all_excluding_statuses([])] == [first, second, third]
        assert [d["id"] for d in store.find_all_excluding_statuses(["completed", "cancelled"])] == [first]
        assert [d["id"] for d in store.find_by_owner("owner-1")] == [first, third]
        assert [d["id"] for d in store.find_by_helper("helper-1")] == [second]

    def test_conditional_update(self, store):
        """Test compare-and-set outcomes."""
        request_id = store.insert(make_document())

        result = store.conditional_update_status(request_id, "active", "in-progress", {"helperId": "helper-1"})
        assert result.outcome == UpdateOutcome.SUCCESS
        assert result.document["helperId"] == "helper-1"

        result = store.conditional_update_status(request_id, "active", "in-progress", {"helperId": "helper-2"})
        assert result.outcome == UpdateOutcome.PRECONDITION_FAILED
        assert result.current_status == "in-progress"
        assert store.find_by_id(request_id)["helperId"] == "helper-1"

        result = store.conditional_update_status(str(ObjectId()), "active", "in-progress")
        assert result.outcome == UpdateOutcome.NOT_FOUND

    def test_concurrent_conditional_updates(self, store):
        """Test only one of many simultaneous compare-and-sets wins."""
        request_id = store.insert(make_document())
        barrier = threading.Barrier(10)

        def attempt(i):
            barrier.wait()
            return store.conditional_update_status(request_id, "active", "in-progress", {"helperId": f"helper-{i}"})

        with ThreadPoolExecutor(max_workers=10) as executor:
            results = list(executor.map(attempt, range(10)))

        assert sum(1 for result in results if result.success) == 1

    def test_delete_and_counts(self, store):
        """Test delete and per-status counts."""
        keep = store.insert(make_document())
        drop = store.insert(make_document(status="cancelled"))

        assert store.count_by_status() == {"active": 1, "cancelled": 1}
        assert store.delete(drop) is True
        assert store.delete(drop) is False
        assert store.count_by_status() == {"active": 1}
        assert store.find_by_id(keep) is not None

    def test_health_check(self, store):
        """Test health reports the document count."""
        store.insert(make_document())

        assert store.health_check() == {"status": "healthy", "backend": "memory", "documents": 1}
