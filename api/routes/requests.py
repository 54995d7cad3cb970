# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Help request endpoints.

Thin HTTP adapter over HelpRequestService: reads the caller identity and
request body, delegates, and renders HAL documents. Failures propagate as
typed exceptions to the registered error handlers.
"""

from flask import request, jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging
from typing import Any, Dict

from domain.errors import ValidationException, field_error
from middleware.identity import require_identity
from models.requests import RequestPath
from models.responses import (
    HelpRequestResponse,
    HelpRequestCollectionResponse,
    StatsResponse,
    ErrorResponse,
    ValidationErrorResponse
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

RADIUS_KEYS = ('radius', 'radiusKm', 'radius_km')

requests_tag = Tag(name="Help Requests", description="Help request lifecycle and proximity matching")
requests_bp = APIBlueprint(
    'help_requests',
    __name__,
    url_prefix='/api/requests',
    abp_tags=[requests_tag]
)

_AUTH_RESPONSES = {"401": ErrorResponse}
_RESOURCE_RESPONSES = {"401": ErrorResponse, "404": ErrorResponse}
_TRANSITION_RESPONSES = {
    "200": HelpRequestResponse,
    "401": ErrorResponse,
    "404": ErrorResponse,
    "409": ErrorResponse,
    "503": ErrorResponse
}


def _json_body() -> Dict[str, Any]:
    """Request JSON object, or a validation error for anything else."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationException(
            "Request body must be a JSON object",
            [field_error("body", "Input should be a valid JSON object", "dict_type")]
        )
    return body


def _service():
    return current_app.help_request_service


def _formatter():
    return current_app.hal_formatter


@requests_bp.post('', responses={"201": HelpRequestResponse, "400": ValidationErrorResponse, **_AUTH_RESPONSES})
@require_identity
def create_help_request():
    """
    Create a help request.

    The caller becomes the owner; the request starts out active.
    """
    user_context = g.user_context
    help_request = _service().create_request(_json_body(), user_context)

    response = jsonify(_formatter().format_help_request(help_request, user_context.user_id))
    response.headers['Location'] = f"{request.base_url.rstrip('/')}/{help_request.id}"
    return response, 201


@requests_bp.get('', responses={"200": HelpRequestCollectionResponse, **_AUTH_RESPONSES})
@require_identity
def list_help_requests():
    """List all help requests, oldest first."""
    user_id = g.user_context.user_id
    help_requests = _service().list_requests()
    return jsonify(_formatter().format_help_request_collection(help_requests, user_id))


@requests_bp.get('/mine', responses={"200": HelpRequestCollectionResponse, **_AUTH_RESPONSES})
@require_identity
def list_my_help_requests():
    """List the caller's own help requests."""
    user_id = g.user_context.user_id
    help_requests = _service().list_requests_by_owner(user_id)
    return jsonify(_formatter().format_help_request_collection(
        help_requests, user_id, collection_path=request.path
    ))


@requests_bp.get('/claimed', responses={"200": HelpRequestCollectionResponse, **_AUTH_RESPONSES})
@require_identity
def list_claimed_help_requests():
    """List help requests the caller has claimed."""
    user_id = g.user_context.user_id
    help_requests = _service().list_requests_by_helper(user_id)
    return jsonify(_formatter().format_help_request_collection(
        help_requests, user_id, collection_path=request.path
    ))


@requests_bp.get('/stats', responses={"200": StatsResponse, **_AUTH_RESPONSES})
@require_identity
def get_help_request_stats():
    """Counts of help requests per status."""
    return jsonify(_formatter().format_stats(_service().get_stats()))


@requests_bp.post('/nearby', responses={"200": HelpRequestCollectionResponse, "400": ValidationErrorResponse, **_AUTH_RESPONSES})
@require_identity
def find_nearby_help_requests():
    """
    Find open help requests near a helper.

    Body: ``lat``, ``lon`` and an optional ``radius`` in kilometers. Results
    are ordered nearest first and carry ``distanceKm``.
    """
    user_id = g.user_context.user_id
    body = _json_body()
    service = _service()

    kwargs = {}
    for key in RADIUS_KEYS:
        if key in body:
            kwargs['radius_km'] = body[key]
            break

    with tracer.start_as_current_span("help_request.nearby.request") as span:
        matches = service.find_nearby(body.get('lat'), body.get('lon'), **kwargs)
        span.set_attribute("help_request.matches", len(matches))

    query = {
        'lat': body.get('lat'),
        'lon': body.get('lon'),
        'radiusKm': kwargs.get('radius_km', service.default_radius_km)
    }
    return jsonify(_formatter().format_nearby_collection(matches, user_id, query))


@requests_bp.get('/<request_id>', responses={"200": HelpRequestResponse, **_RESOURCE_RESPONSES})
@require_identity
def get_help_request(path: RequestPath):
    """Get a single help request."""
    help_request = _service().get_request(path.request_id)
    return jsonify(_formatter().format_help_request(help_request, g.user_context.user_id))


@requests_bp.post('/<request_id>/claim', responses=_TRANSITION_RESPONSES)
@require_identity
def claim_help_request(path: RequestPath):
    """
    Claim an active help request for the caller.

    When several helpers claim at once, exactly one wins; the others get 409.
    """
    user_id = g.user_context.user_id
    help_request = _service().claim_request(path.request_id, user_id)
    return jsonify(_formatter().format_help_request(help_request, user_id))


@requests_bp.post('/<request_id>/resolve', responses=_TRANSITION_RESPONSES)
@require_identity
def resolve_help_request(path: RequestPath):
    """Mark an in-progress help request as completed."""
    help_request = _service().resolve_request(path.request_id)
    return jsonify(_formatter().format_help_request(help_request, g.user_context.user_id))


@requests_bp.post('/<request_id>/cancel', responses={**_TRANSITION_RESPONSES, "403": ErrorResponse})
@require_identity
def cancel_help_request(path: RequestPath):
    """Cancel a help request. Only its owner may do this."""
    user_id = g.user_context.user_id
    help_request = _service().cancel_request(path.request_id, user_id)
    return jsonify(_formatter().format_help_request(help_request, user_id))


@requests_bp.delete('/<request_id>', responses={"403": ErrorResponse, "409": ErrorResponse, **_RESOURCE_RESPONSES})
@require_identity
def remove_help_request(path: RequestPath):
    """Permanently remove a completed or cancelled help request owned by the caller."""
    _service().remove_request(path.request_id, g.user_context.user_id)
    return '', 204
