# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints with HAL support.

These models document the response shapes in the OpenAPI specification.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class HalLink(BaseModel):
    """HAL link representation."""

    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


class HalResponse(BaseModel):
    """Base HAL response with links."""

    model_config = ConfigDict(populate_by_name=True)

    links: Dict[str, HalLink] = Field(default_factory=dict, alias="_links", description="HAL links")


class GeoPointResponse(BaseModel):
    lat: float = Field(..., description="Latitude")
    lon: float = Field(..., description="Longitude")


class HelpRequestResponse(HalResponse):
    """Help request response model."""

    id: str = Field(..., description="Request ID")
    requesterName: str = Field(..., description="Requester display name")
    memberCount: int = Field(..., description="Number of people affected")
    description: str = Field(..., description="Situation description")
    address: str = Field(..., description="Human-readable location")
    location: GeoPointResponse = Field(..., description="Request coordinates")
    ownerId: str = Field(..., description="Requester user ID")
    ownerContact: str = Field(..., description="Requester contact")
    status: str = Field(..., description="Lifecycle status")
    helperId: Optional[str] = Field(None, description="Claiming helper user ID")
    createdAt: datetime = Field(..., description="Creation timestamp")
    updatedAt: datetime = Field(..., description="Last update timestamp")
    distanceKm: Optional[float] = Field(None, description="Distance from the query point (nearby only)")


class HelpRequestCollectionResponse(HalResponse):
    """HAL collection of help requests."""

    total: int = Field(..., description="Number of embedded items")
    embedded: Dict[str, List[HelpRequestResponse]] = Field(
        default_factory=dict, alias="_embedded", description="Embedded resources"
    )


class StatsResponse(HalResponse):
    """Request counts per status."""

    total: int = Field(..., description="Total number of requests")
    active: int = Field(..., description="Requests waiting for a helper")
    inProgress: int = Field(..., description="Requests claimed by a helper")
    completed: int = Field(..., description="Resolved requests")
    cancelled: int = Field(..., description="Cancelled requests")


class HealthCheckResponse(HalResponse):
    """Health check response model."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    timestamp: datetime = Field(..., description="Check timestamp")
    dependencies: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Dependency health")


class ErrorResponse(BaseModel):
    """Error response model following RFC 7807."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Error detail")
    instance: str = Field(..., description="Request instance")
    errors: Optional[List[Dict[str, Any]]] = Field(None, description="Validation errors")
    links: Optional[Dict[str, HalLink]] = Field(None, alias="_links", description="HAL links")


class ValidationErrorResponse(ErrorResponse):
    """Validation error response with field details."""

    errors: List[Dict[str, Any]] = Field(..., description="Field validation errors")
