# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_RADIUS_KM = 50.0


def _reject_bool(v):
    if isinstance(v, bool):
        raise ValueError('Value must be a number')
    return v


class CreateHelpRequestRequest(BaseModel):
    """Request model for creating a help request.

    Accepts the field names of the original web client (``Name``, ``Members``,
    ``Desc``, ``Address``, ``Lat``, ``Lon``) as well as the documented ones.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices('name', 'requesterName', 'Name'),
        description="Requester display name"
    )
    members: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices('members', 'memberCount', 'Members'),
        description="Number of people affected"
    )
    description: str = Field(
        default="",
        max_length=2000,
        validation_alias=AliasChoices('description', 'desc', 'Desc'),
        description="Situation description"
    )
    address: str = Field(
        default="",
        max_length=500,
        validation_alias=AliasChoices('address', 'Address'),
        description="Human-readable location"
    )
    lat: float = Field(..., ge=-90, le=90, validation_alias=AliasChoices('lat', 'Lat'), description="Latitude")
    lon: float = Field(..., ge=-180, le=180, validation_alias=AliasChoices('lon', 'Lon'), description="Longitude")
    owner_contact: Optional[str] = Field(
        None,
        max_length=320,
        validation_alias=AliasChoices('ownerContact', 'owner_contact', 'userEmail'),
        description="Contact string; defaults to the caller's email"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate requester name."""
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()

    @field_validator('members', 'lat', 'lon', mode='before')
    @classmethod
    def reject_booleans(cls, v):
        return _reject_bool(v)


class NearbyQueryRequest(BaseModel):
    """Request model for a radius query around a helper's location."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float = Field(..., ge=-90, le=90, description="Helper latitude")
    lon: float = Field(..., ge=-180, le=180, description="Helper longitude")
    radius_km: float = Field(
        default=DEFAULT_RADIUS_KM,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices('radius', 'radiusKm', 'radius_km'),
        description="Search radius in kilometers"
    )

    @field_validator('lat', 'lon', 'radius_km', mode='before')
    @classmethod
    def reject_booleans(cls, v):
        return _reject_bool(v)


class RequestPath(BaseModel):
    """Path parameters for single help request endpoints."""

    request_id: str = Field(..., description="Help request ID")
