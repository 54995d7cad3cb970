# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Help request lifecycle service.

Orchestrates validation, the pure lifecycle rules and the store gateway.
Status transitions are executed only through the gateway's atomic
conditional update; there is no read-then-write path that could let two
helpers claim the same request.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Tuple

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from domain import lifecycle
from domain.errors import (
    CrisisConnectException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException
)
from domain.proximity import rank_nearby
from domain.stats import summarize_status_counts
from domain.validation import (
    format_validation_errors,
    validate_create_payload,
    validate_identifier,
    validate_nearby_query
)
from models.base import utcnow
from models.entities import GeoPoint, HelpRequest, RequestStats, UserContext
from models.enums import RequestEvent, RequestStatus, TERMINAL_STATUSES
from models.requests import DEFAULT_RADIUS_KM
from .store import RequestStore, UpdateOutcome

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_UNSET = object()

_CONFLICT_MESSAGES = {
    RequestEvent.CLAIM: "cannot be claimed",
    RequestEvent.RESOLVE: "cannot be resolved",
    RequestEvent.CANCEL: "cannot be cancelled",
}


@contextmanager
def _operation_span(name: str, **attributes):
    """Span around a service operation; typed failures mark it as errored."""
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        try:
            yield span
        except CrisisConnectException as e:
            span.set_attribute("error.type", e.error_type)
            span.set_status(Status(StatusCode.ERROR, e.message))
            raise


class HelpRequestService:
    """Lifecycle manager for help requests over an injected store gateway."""

    def __init__(self, store: RequestStore, default_radius_km: float = DEFAULT_RADIUS_KM):
        self.store = store
        self.default_radius_km = default_radius_km

    # Creation and reads

    def create_request(self, payload: Mapping[str, Any], user_context: UserContext) -> HelpRequest:
        """
        Validate and persist a new help request owned by the caller.

        Args:
            payload: Raw create payload (name, members, description, address, lat, lon)
            user_context: Caller identity; becomes the owner

        Returns:
            The created request with its store-assigned id and status ``active``

        Raises:
            ValidationException: If the payload is malformed
        """
        with _operation_span("help_request.create", **{"user.id": user_context.user_id}) as span:
            owner_id = validate_identifier(user_context.user_id, "ownerId")
            data = validate_create_payload(payload)

            owner_contact = data.owner_contact if data.owner_contact is not None else (user_context.email or "")

            now = utcnow()
            try:
                help_request = HelpRequest(
                    requester_name=data.name,
                    member_count=data.members,
                    description=data.description,
                    address=data.address,
                    location=GeoPoint(lat=data.lat, lon=data.lon),
                    owner_id=owner_id,
                    owner_contact=owner_contact,
                    created_at=now,
                    updated_at=now
                )
            except ValidationError as e:
                raise ValidationException("Invalid help request", format_validation_errors(e))

            document = help_request.to_document()
            document.pop("id", None)

            with tracer.start_as_current_span("db.help_requests.insert"):
                request_id = self.store.insert(document)

            created = help_request.model_copy(update={"id": request_id})
            span.set_attribute("help_request.id", request_id)

            logger.info(
                "Help request created",
                extra={
                    "request_id": request_id,
                    "owner_id": owner_id,
                    "member_count": created.member_count
                }
            )
            return created

    def get_request(self, request_id: str) -> HelpRequest:
        """Fetch one request or raise NotFoundException."""
        request_id = validate_identifier(request_id, "requestId")

        with _operation_span("help_request.get", **{"help_request.id": request_id}):
            document = self.store.find_by_id(request_id)
            if document is None:
                raise NotFoundException(f"Help request {request_id} not found")
            return HelpRequest.from_document(document)

    def list_requests(self) -> List[HelpRequest]:
        """All requests, oldest first."""
        with _operation_span("help_request.list"):
            documents = self.store.find_all_excluding_statuses([])
            return [HelpRequest.from_document(doc) for doc in documents]

    def list_requests_by_owner(self, owner_id: str) -> List[HelpRequest]:
        """Requests created by ``owner_id``, oldest first."""
        owner_id = validate_identifier(owner_id, "ownerId")

        with _operation_span("help_request.list_by_owner", **{"user.id": owner_id}):
            return [HelpRequest.from_document(doc) for doc in self.store.find_by_owner(owner_id)]

    def list_requests_by_helper(self, helper_id: str) -> List[HelpRequest]:
        """Requests claimed by ``helper_id`` (in progress or completed), oldest first."""
        helper_id = validate_identifier(helper_id, "helperId")

        with _operation_span("help_request.list_by_helper", **{"user.id": helper_id}):
            return [HelpRequest.from_document(doc) for doc in self.store.find_by_helper(helper_id)]

    def find_nearby(self, lat: Any, lon: Any, radius_km: Any = _UNSET) -> List[Tuple[HelpRequest, float]]:
        """
        Open requests within ``radius_km`` of a helper, nearest first.

        Args:
            lat: Helper latitude
            lon: Helper longitude
            radius_km: Search radius; the service default applies when omitted

        Returns:
            List of (request, distance_km) pairs

        Raises:
            ValidationException: For invalid coordinates or a non-positive radius
        """
        query = {"lat": lat, "lon": lon}
        query["radius"] = self.default_radius_km if radius_km is _UNSET else radius_km
        parsed = validate_nearby_query(query)

        with _operation_span(
            "help_request.nearby",
            **{"geo.lat": parsed.lat, "geo.lon": parsed.lon, "geo.radius_km": parsed.radius_km}
        ) as span:
            # Fresh snapshot per call; a request claimed after this read shows
            # up as claimed on the next poll
            with tracer.start_as_current_span("db.help_requests.find_open"):
                documents = self.store.find_all_excluding_statuses([s.value for s in TERMINAL_STATUSES])

            candidates = [HelpRequest.from_document(doc) for doc in documents]
            matches = rank_nearby(parsed.lat, parsed.lon, parsed.radius_km, candidates)

            span.set_attributes({
                "help_request.candidates": len(candidates),
                "help_request.matches": len(matches)
            })
            return matches

    # Transitions

    def claim_request(self, request_id: str, helper_id: str) -> HelpRequest:
        """
        Assign an active request to ``helper_id``.

        Exactly one of several concurrent claims on the same request succeeds;
        the others get ConflictException.

        Raises:
            ValidationException: Missing request id or helper id
            NotFoundException: No such request
            ConflictException: Request is not active (already claimed, completed or cancelled)
        """
        request_id = validate_identifier(request_id, "requestId")
        helper_id = validate_identifier(helper_id, "helperId")

        with _operation_span("help_request.claim", **{"help_request.id": request_id, "user.id": helper_id}):
            claimed = self._apply_transition(request_id, RequestEvent.CLAIM, helper_id=helper_id)

            logger.info(
                "Help request claimed",
                extra={"request_id": request_id, "helper_id": helper_id}
            )
            return claimed

    def resolve_request(self, request_id: str) -> HelpRequest:
        """
        Mark an in-progress request as completed.

        Raises:
            NotFoundException: No such request
            ConflictException: Request is not in progress (including already completed)
        """
        request_id = validate_identifier(request_id, "requestId")

        with _operation_span("help_request.resolve", **{"help_request.id": request_id}):
            resolved = self._apply_transition(request_id, RequestEvent.RESOLVE)

            logger.info(
                "Help request resolved",
                extra={"request_id": request_id, "helper_id": resolved.helper_id}
            )
            return resolved

    def cancel_request(self, request_id: str, user_id: str) -> HelpRequest:
        """
        Cancel an active or in-progress request on behalf of its owner.

        Cancelling an in-progress request releases the helper.

        Raises:
            NotFoundException: No such request
            ForbiddenException: Caller is not the owner
            ConflictException: Request is already completed or cancelled
        """
        request_id = validate_identifier(request_id, "requestId")
        user_id = validate_identifier(user_id, "userId")

        with _operation_span("help_request.cancel", **{"help_request.id": request_id, "user.id": user_id}):
            # ownerId never changes, so checking it before the conditional
            # update cannot race with other writers
            self._require_owner(request_id, user_id)

            cancelled = self._apply_transition(request_id, RequestEvent.CANCEL)

            logger.info(
                "Help request cancelled",
                extra={"request_id": request_id, "owner_id": user_id}
            )
            return cancelled

    def remove_request(self, request_id: str, user_id: str) -> None:
        """
        Permanently delete a completed or cancelled request owned by the caller.

        Raises:
            NotFoundException: No such request
            ForbiddenException: Caller is not the owner
            ConflictException: Request is still active or in progress
        """
        request_id = validate_identifier(request_id, "requestId")
        user_id = validate_identifier(user_id, "userId")

        with _operation_span("help_request.remove", **{"help_request.id": request_id, "user.id": user_id}):
            help_request = self._require_owner(request_id, user_id)

            # Terminal records accept no transitions, so this check stays true
            if not help_request.is_terminal():
                raise ConflictException(
                    f"Help request {request_id} must be cancelled or completed before removal "
                    f"(current status: {help_request.status})",
                    current_status=help_request.status
                )

            if not self.store.delete(request_id):
                raise NotFoundException(f"Help request {request_id} not found")

            logger.warning(
                "Help request removed",
                extra={"request_id": request_id, "owner_id": user_id}
            )

    # Statistics

    def get_stats(self) -> RequestStats:
        """Counts per status; eventually consistent under concurrent writes."""
        with _operation_span("help_request.stats"):
            return summarize_status_counts(self.store.count_by_status())

    # Internals

    def _require_owner(self, request_id: str, user_id: str) -> HelpRequest:
        document = self.store.find_by_id(request_id)
        if document is None:
            raise NotFoundException(f"Help request {request_id} not found")

        help_request = HelpRequest.from_document(document)
        if not help_request.is_owned_by(user_id):
            logger.warning(
                "Rejected action by non-owner",
                extra={"request_id": request_id, "user_id": user_id}
            )
            raise ForbiddenException(f"Only the owner may modify help request {request_id}")

        return help_request

    def _apply_transition(
        self,
        request_id: str,
        event: RequestEvent,
        helper_id: Optional[str] = None
    ) -> HelpRequest:
        """Run ``event`` as one conditional update per legal source status."""
        fields: Dict[str, Any] = lifecycle.build_transition_fields(event, utcnow(), helper_id=helper_id)
        current_status: Optional[str] = None

        for source in lifecycle.source_states_for(event):
            target = lifecycle.target_state_for(source, event)

            with tracer.start_as_current_span(
                "db.help_requests.conditional_update",
                attributes={"help_request.id": request_id, "status.expected": source.value}
            ) as db_span:
                result = self.store.conditional_update_status(request_id, source.value, target.value, fields)
                db_span.set_attribute("db.outcome", result.outcome.value)

            if result.success:
                return HelpRequest.from_document(result.document)

            if result.outcome == UpdateOutcome.NOT_FOUND:
                raise NotFoundException(f"Help request {request_id} not found")

            current_status = result.current_status

        logger.warning(
            "Help request transition rejected",
            extra={"request_id": request_id, "event": event.value, "current_status": current_status}
        )

        if event == RequestEvent.CLAIM and current_status == RequestStatus.IN_PROGRESS.value:
            message = f"Help request {request_id} was already claimed by someone else"
        else:
            message = f"Help request {request_id} {_CONFLICT_MESSAGES[event]} (current status: {current_status})"

        raise ConflictException(message, current_status=current_status)
