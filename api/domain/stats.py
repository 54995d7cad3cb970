# SPDX-License-Identifier: Apache-2.0

"""
Request statistics summarisation.
"""

from typing import Mapping

from models.entities import RequestStats
from models.enums import RequestStatus


def summarize_status_counts(counts: Mapping[str, int]) -> RequestStats:
    """
    Build per-status statistics from a status -> count mapping.

    ``total`` is the sum of the per-status counts taken from the same mapping,
    so the result is internally consistent even though the mapping itself may
    be a slightly stale view of a store under concurrent writes. Unknown
    status values still count towards ``total``.
    """
    def count(status: RequestStatus) -> int:
        return int(counts.get(status.value, 0))

    return RequestStats(
        total=sum(int(value) for value in counts.values()),
        active=count(RequestStatus.ACTIVE),
        in_progress=count(RequestStatus.IN_PROGRESS),
        completed=count(RequestStatus.COMPLETED),
        cancelled=count(RequestStatus.CANCELLED)
    )
