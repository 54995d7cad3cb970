# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the CrisisConnect platform.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from .base import BaseEntity, CamelModel
from .enums import RequestStatus, HELPER_STATUSES, TERMINAL_STATUSES


class GeoPoint(CamelModel):
    """A latitude/longitude pair in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")

    @field_validator('lat', 'lon', mode='before')
    @classmethod
    def reject_booleans(cls, v):
        """Booleans are ints to Python but never valid coordinates."""
        if isinstance(v, bool):
            raise ValueError('Coordinate must be a number')
        return v


class HelpRequest(BaseEntity):
    """A persisted request for assistance."""

    requester_name: str = Field(..., min_length=1, max_length=200, description="Requester display name")
    member_count: int = Field(..., ge=1, description="Number of people affected")
    description: str = Field(default="", max_length=2000, description="Situation description")
    address: str = Field(default="", max_length=500, description="Human-readable location")
    location: GeoPoint = Field(..., description="Request coordinates")
    owner_id: str = Field(..., min_length=1, description="User ID of the requester")
    owner_contact: str = Field(default="", description="Requester contact captured at creation")
    status: RequestStatus = Field(default=RequestStatus.ACTIVE, description="Lifecycle status")
    helper_id: Optional[str] = Field(None, description="User ID of the claiming helper")

    @field_validator('requester_name')
    @classmethod
    def validate_requester_name(cls, v):
        """Validate requester name."""
        if not v.strip():
            raise ValueError('Requester name cannot be empty')
        return v.strip()

    @field_validator('owner_id')
    @classmethod
    def validate_owner_id(cls, v):
        if not v.strip():
            raise ValueError('Owner ID cannot be empty')
        return v

    @model_validator(mode='after')
    def validate_helper_assignment(self):
        """helperId is set exactly when a helper holds or has resolved the request."""
        if self.status in HELPER_STATUSES and not self.helper_id:
            raise ValueError(f'helper_id is required when status is {self.status}')

        if self.status not in HELPER_STATUSES and self.helper_id is not None:
            raise ValueError(f'helper_id must be empty when status is {self.status}')

        return self

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "HelpRequest":
        """Build an entity from a store document."""
        return cls.model_validate(document)

    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self.status in TERMINAL_STATUSES

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id


class RequestStats(CamelModel):
    """Counts of help requests per status."""

    total: int = Field(..., ge=0, description="Total number of requests")
    active: int = Field(..., ge=0, description="Requests waiting for a helper")
    in_progress: int = Field(..., ge=0, description="Requests claimed by a helper")
    completed: int = Field(..., ge=0, description="Resolved requests")
    cancelled: int = Field(..., ge=0, description="Requests cancelled by their owner")


class UserContext(BaseModel):
    """Identity of the caller, supplied by the external identity layer."""

    user_id: str = Field(..., min_length=1, description="Authenticated user ID")
    email: Optional[str] = Field(None, description="User email")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")

    model_config = ConfigDict(
        use_enum_values=True
    )
