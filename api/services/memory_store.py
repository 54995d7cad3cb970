# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
In-process help request store for local development and tests.

Implements the same contract as the MongoDB store. A single lock makes every
operation, and in particular the conditional status update, atomic.
"""

import copy
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

from models.base import utcnow
from .store import RequestStore, UpdateOutcome, UpdateResult

logger = logging.getLogger(__name__)


class InMemoryRequestStore(RequestStore):
    """Help request store kept in a dict."""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        logger.info("In-memory request store initialized")

    def _sorted(self, documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # ObjectIds are increasing, so the id breaks createdAt ties in insertion order
        ordered = sorted(documents, key=lambda doc: (doc["createdAt"], doc["id"]))
        return [copy.deepcopy(doc) for doc in ordered]

    def insert(self, document: Dict[str, Any]) -> str:
        document = {key: copy.deepcopy(value) for key, value in document.items() if key not in ("id", "_id")}
        now = utcnow()
        document.setdefault("createdAt", now)
        document.setdefault("updatedAt", document["createdAt"])

        request_id = str(ObjectId())
        document["id"] = request_id

        with self._lock:
            self._documents[request_id] = document

        logger.debug(f"Created document {request_id}")
        return request_id

    def find_by_id(self, request_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._documents.get(request_id)
            return copy.deepcopy(document) if document is not None else None

    def find_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return self._sorted(doc for doc in self._documents.values() if doc.get("ownerId") == owner_id)

    def find_by_helper(self, helper_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return self._sorted(doc for doc in self._documents.values() if doc.get("helperId") == helper_id)

    def find_all_excluding_statuses(self, statuses: Iterable[str]) -> List[Dict[str, Any]]:
        excluded = {str(status) for status in statuses}
        with self._lock:
            return self._sorted(doc for doc in self._documents.values() if doc.get("status") not in excluded)

    def conditional_update_status(
        self,
        request_id: str,
        expected_status: str,
        new_status: str,
        fields: Optional[Dict[str, Any]] = None
    ) -> UpdateResult:
        with self._lock:
            document = self._documents.get(request_id)
            if document is None:
                return UpdateResult(UpdateOutcome.NOT_FOUND)

            if document.get("status") != expected_status:
                return UpdateResult(UpdateOutcome.PRECONDITION_FAILED, current_status=document.get("status"))

            document.update(copy.deepcopy(fields or {}))
            document["status"] = new_status
            return UpdateResult(UpdateOutcome.SUCCESS, document=copy.deepcopy(document))

    def delete(self, request_id: str) -> bool:
        with self._lock:
            return self._documents.pop(request_id, None) is not None

    def count_by_status(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        with self._lock:
            for document in self._documents.values():
                status = document.get("status")
                counts[status] = counts.get(status, 0) + 1
        return counts

    def health_check(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._documents)
        return {
            'status': 'healthy',
            'backend': 'memory',
            'documents': size
        }
