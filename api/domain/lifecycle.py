# SPDX-License-Identifier: Apache-2.0

"""
Help request lifecycle rules.

The state machine is data: ``TRANSITIONS`` maps (current status, event) to the
next status. Everything here is pure; executing a transition against the store
is the job of ``services.requests``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from models.entities import HelpRequest
from models.enums import RequestEvent, RequestStatus, TERMINAL_STATUSES

# Order matters: when an event has several source states, they are tried in
# this order.
TRANSITIONS = {
    (RequestStatus.ACTIVE, RequestEvent.CLAIM): RequestStatus.IN_PROGRESS,
    (RequestStatus.IN_PROGRESS, RequestEvent.RESOLVE): RequestStatus.COMPLETED,
    (RequestStatus.ACTIVE, RequestEvent.CANCEL): RequestStatus.CANCELLED,
    (RequestStatus.IN_PROGRESS, RequestEvent.CANCEL): RequestStatus.CANCELLED,
}

# Events only the request owner may trigger
OWNER_ONLY_EVENTS = frozenset({RequestEvent.CANCEL})


def can_transition(current_status: str, event: RequestEvent) -> bool:
    """Check if ``event`` is legal from ``current_status``."""
    return (RequestStatus(current_status), event) in TRANSITIONS


def source_states_for(event: RequestEvent) -> List[RequestStatus]:
    """Statuses from which ``event`` is legal, in table order."""
    return [source for (source, ev) in TRANSITIONS if ev == event]


def target_state_for(current_status: str, event: RequestEvent) -> Optional[RequestStatus]:
    """Status reached by applying ``event`` to ``current_status``, or None."""
    return TRANSITIONS.get((RequestStatus(current_status), event))


def is_terminal(status: str) -> bool:
    return RequestStatus(status) in TERMINAL_STATUSES


def build_transition_fields(
    event: RequestEvent,
    now: datetime,
    helper_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Document fields written alongside the status change.

    Args:
        event: Lifecycle event being applied
        now: Timestamp for ``updatedAt``
        helper_id: Claiming helper, required for CLAIM

    Returns:
        camelCase fields to set on the record
    """
    fields: Dict[str, Any] = {"updatedAt": now}

    if event == RequestEvent.CLAIM:
        if not helper_id:
            raise ValueError("helper_id is required to claim a request")
        fields["helperId"] = helper_id
    elif event == RequestEvent.CANCEL:
        # A cancelled request releases whoever was helping
        fields["helperId"] = None

    return fields


def available_actions(help_request: HelpRequest, user_id: Optional[str]) -> List[str]:
    """
    Actions ``user_id`` could currently take on the request.

    Used to render affordance links; the store remains the arbiter, so an
    action listed here can still fail with a conflict.
    """
    actions = []
    is_owner = user_id is not None and help_request.is_owned_by(user_id)

    for event in (RequestEvent.CLAIM, RequestEvent.RESOLVE, RequestEvent.CANCEL):
        if not can_transition(help_request.status, event):
            continue
        if event in OWNER_ONLY_EVENTS and not is_owner:
            continue
        actions.append(event.value)

    if is_owner and help_request.is_terminal():
        actions.append("remove")

    return actions
