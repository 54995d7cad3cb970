# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Store gateway contract for help request records.

The lifecycle service depends only on this interface. Implementations must
make ``conditional_update_status`` an atomic compare-and-set on the record's
status; everything else is plain CRUD.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

COLLECTION_NAME = "help_requests"


class UpdateOutcome(str, Enum):
    """Outcome of a conditional status update."""
    SUCCESS = "success"
    NOT_FOUND = "not-found"
    PRECONDITION_FAILED = "precondition-failed"


@dataclass
class UpdateResult:
    """Result of a conditional status update."""
    outcome: UpdateOutcome
    document: Optional[Dict[str, Any]] = None
    current_status: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome == UpdateOutcome.SUCCESS


class RequestStore(ABC):
    """CRUD plus conditional update over help request documents.

    Documents are plain dicts with camelCase keys and a string ``id``.
    Listing methods return documents ordered by ``createdAt`` ascending.
    """

    @abstractmethod
    def insert(self, document: Dict[str, Any]) -> str:
        """Persist a new document and return its assigned id."""

    @abstractmethod
    def find_by_id(self, request_id: str) -> Optional[Dict[str, Any]]:
        """Return the document, or None if it does not exist."""

    @abstractmethod
    def find_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        """Documents created by ``owner_id``."""

    @abstractmethod
    def find_by_helper(self, helper_id: str) -> List[Dict[str, Any]]:
        """Documents whose ``helperId`` is ``helper_id``."""

    @abstractmethod
    def find_all_excluding_statuses(self, statuses: Iterable[str]) -> List[Dict[str, Any]]:
        """Documents whose status is not in ``statuses``."""

    @abstractmethod
    def conditional_update_status(
        self,
        request_id: str,
        expected_status: str,
        new_status: str,
        fields: Optional[Dict[str, Any]] = None
    ) -> UpdateResult:
        """
        Atomically set ``status=new_status`` and ``fields`` if the current
        status equals ``expected_status``.
        """

    @abstractmethod
    def delete(self, request_id: str) -> bool:
        """Remove the document. Returns False if it did not exist."""

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """Number of documents per status value."""

    @abstractmethod
    def health_check(self) -> Dict[str, Any]:
        """Report store health as ``{'status': 'healthy' | 'unhealthy', ...}``."""

    def close_connection(self) -> None:
        """Release any held resources."""
