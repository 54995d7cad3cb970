# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the CrisisConnect platform.
"""

# Base models
from .base import BaseEntity, CamelModel, generate_object_id, utcnow

# Enumerations
from .enums import RequestStatus, RequestEvent, TERMINAL_STATUSES, HELPER_STATUSES

# Core entities
from .entities import GeoPoint, HelpRequest, RequestStats, UserContext

# Request models
from .requests import CreateHelpRequestRequest, NearbyQueryRequest, RequestPath, DEFAULT_RADIUS_KM

# Response models
from .responses import (
    HalLink,
    HalResponse,
    HelpRequestResponse,
    HelpRequestCollectionResponse,
    StatsResponse,
    HealthCheckResponse,
    ErrorResponse,
    ValidationErrorResponse
)

__all__ = [
    # Base models
    "BaseEntity",
    "CamelModel",
    "generate_object_id",
    "utcnow",

    # Enumerations
    "RequestStatus",
    "RequestEvent",
    "TERMINAL_STATUSES",
    "HELPER_STATUSES",

    # Core entities
    "GeoPoint",
    "HelpRequest",
    "RequestStats",
    "UserContext",

    # Request models
    "CreateHelpRequestRequest",
    "NearbyQueryRequest",
    "RequestPath",
    "DEFAULT_RADIUS_KM",

    # Response models
    "HalLink",
    "HalResponse",
    "HelpRequestResponse",
    "HelpRequestCollectionResponse",
    "StatsResponse",
    "HealthCheckResponse",
    "ErrorResponse",
    "ValidationErrorResponse"
]
