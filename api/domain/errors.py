# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Typed error outcomes for the help request core.

Every failure the core can report is one of these exceptions. The HTTP layer
maps them onto problem documents through ``status_code`` and ``error_type``.
"""

from typing import Any, Dict, List, Optional


class CrisisConnectException(Exception):
    """Base class for application exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CrisisConnectException):
    """Malformed input, rejected before any store access."""

    def __init__(self, message: str, validation_errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(CrisisConnectException):
    """Caller identity was not supplied."""

    def __init__(self, message: str):
        super().__init__(message, 401, "authentication-required")


class ForbiddenException(CrisisConnectException):
    """Caller is not allowed to act on the record (e.g. cancel by a non-owner)."""

    def __init__(self, message: str):
        super().__init__(message, 403, "insufficient-permissions")


class NotFoundException(CrisisConnectException):
    """Referenced record does not exist."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class ConflictException(CrisisConnectException):
    """Record is not in a state that allows the requested transition."""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message, 409, "resource-conflict")
        self.current_status = current_status


class StoreUnavailableException(CrisisConnectException):
    """The backing store is unreachable or timed out. Safe to retry with backoff."""

    def __init__(self, message: str):
        super().__init__(message, 503, "service-unavailable")


def field_error(field: str, message: str, error_type: str = "value_error", value: Any = None) -> Dict[str, Any]:
    """Build one entry of ``ValidationException.validation_errors``."""
    return {
        "field": field,
        "message": message,
        "type": error_type,
        "input": value
    }
