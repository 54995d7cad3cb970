# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Implements HATEOAS responses whose affordance links follow the help request
lifecycle.
"""

from typing import Dict, List, Any, Optional, Tuple
from urllib.parse import urljoin

from domain.lifecycle import available_actions
from models.entities import HelpRequest, RequestStats
from models.responses import HalLink

REQUESTS_PATH = "/api/requests"
PROBLEM_BASE_URI = "https://api.crisisconnect.org/problems"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url, path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated or None
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")

    def build_collection_link(self, collection_path: str) -> HalLink:
        """Build link to parent collection."""
        return self.build_link(collection_path, title="Collection")

    def build_action_link(
        self,
        resource_path: str,
        action: str,
        method: str = "POST",
        title: Optional[str] = None
    ) -> HalLink:
        """Build action link for a resource."""
        action_path = f"{resource_path}/{action}"
        return self.build_link(
            action_path,
            method=method,
            content_type="application/json",
            title=title or action.title()
        )


class AffordanceLinkBuilder:
    """Builder for conditional affordance links based on caller and state."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_help_request_affordances(
        self,
        help_request: HelpRequest,
        current_user_id: Optional[str]
    ) -> Dict[str, HalLink]:
        """Build links for the actions the lifecycle currently allows."""
        base_path = f"{REQUESTS_PATH}/{help_request.id}"
        links = {
            'self': self.link_builder.build_self_link(base_path),
            'collection': self.link_builder.build_collection_link(REQUESTS_PATH)
        }

        for action in available_actions(help_request, current_user_id):
            if action == "remove":
                links['remove'] = self.link_builder.build_link(
                    base_path,
                    method="DELETE",
                    title="Remove request"
                )
            else:
                links[action] = self.link_builder.build_action_link(
                    base_path, action, title=f"{action.title()} request"
                )

        return links


class HalResponseBuilder:
    """Main HAL response builder."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.affordance_builder = AffordanceLinkBuilder(base_url)

    @staticmethod
    def _links_to_dict(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
        return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}

    def build_resource_response(
        self,
        help_request: HelpRequest,
        current_user_id: Optional[str],
        extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a HAL resource response with appropriate affordance links."""
        response = help_request.model_dump(mode="json", by_alias=True)
        if extra:
            response.update(extra)

        links = self.affordance_builder.build_help_request_affordances(help_request, current_user_id)
        response['_links'] = self._links_to_dict(links)
        return response

    def build_collection_response(
        self,
        items: List[Dict[str, Any]],
        collection_path: str,
        query: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a HAL collection response with embedded items."""
        links = {'self': self.link_builder.build_self_link(collection_path)}
        if collection_path != REQUESTS_PATH:
            links['collection'] = self.link_builder.build_collection_link(REQUESTS_PATH)

        response = {
            'total': len(items),
            '_links': self._links_to_dict(links),
            '_embedded': {
                'requests': items
            }
        }
        if query:
            response['query'] = query

        return response

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{PROBLEM_BASE_URI}/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': self.link_builder.build_link(
                f"/docs/errors#{error_type}",
                title="Error documentation"
            )
        }

        # Add specific links based on error type
        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )
        elif error_type == "resource-conflict":
            links['nearby'] = self.link_builder.build_link(
                f"{REQUESTS_PATH}/nearby",
                method="POST",
                content_type="application/json",
                title="Find other open requests"
            )

        error_response['_links'] = self._links_to_dict(links)
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_help_request(
        self,
        help_request: HelpRequest,
        current_user_id: Optional[str]
    ) -> Dict[str, Any]:
        """Format a help request with HAL links."""
        return self.builder.build_resource_response(help_request, current_user_id)

    def format_help_request_collection(
        self,
        help_requests: List[HelpRequest],
        current_user_id: Optional[str],
        collection_path: str = REQUESTS_PATH
    ) -> Dict[str, Any]:
        """Format a collection of help requests with HAL links."""
        items = [self.format_help_request(item, current_user_id) for item in help_requests]
        return self.builder.build_collection_response(items, collection_path)

    def format_nearby_collection(
        self,
        matches: List[Tuple[HelpRequest, float]],
        current_user_id: Optional[str],
        query: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Format ranked nearby matches, each carrying its distance."""
        items = [
            self.builder.build_resource_response(
                help_request, current_user_id, extra={'distanceKm': round(distance, 3)}
            )
            for help_request, distance in matches
        ]
        return self.builder.build_collection_response(items, f"{REQUESTS_PATH}/nearby", query)

    def format_stats(self, stats: RequestStats) -> Dict[str, Any]:
        """Format request statistics with HAL links."""
        response = stats.model_dump(by_alias=True)
        response['_links'] = self.builder._links_to_dict({
            'self': self.builder.link_builder.build_self_link(f"{REQUESTS_PATH}/stats"),
            'collection': self.builder.link_builder.build_collection_link(REQUESTS_PATH)
        })
        return response

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(
            "authentication-required",
            "Authentication Required",
            401,
            detail,
            instance
        )

    def format_authorization_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "insufficient-permissions",
            "Insufficient Permissions",
            403,
            detail,
            instance
        )

    def format_not_found_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_conflict_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a conflict error response."""
        return self.builder.build_error_response(
            "resource-conflict",
            "Resource Conflict",
            409,
            detail,
            instance
        )

    def format_service_unavailable_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a transient store failure; clients may retry with backoff."""
        return self.builder.build_error_response(
            "service-unavailable",
            "Service Unavailable",
            503,
            detail,
            instance
        )

    def format_server_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            instance
        )


# Convenience function for creating HAL formatter
def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
