# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the CrisisConnect platform.
"""

from enum import Enum


class RequestStatus(str, Enum):
    """Help request lifecycle status enumeration."""
    ACTIVE = "active"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RequestEvent(str, Enum):
    """Events that move a help request between statuses."""
    CLAIM = "claim"
    RESOLVE = "resolve"
    CANCEL = "cancel"


TERMINAL_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})

# Statuses for which helperId must be set
HELPER_STATUSES = frozenset({RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED})
