# SPDX-License-Identifier: Apache-2.0

"""
Input validation for help request operations.

Turns raw payloads into validated models, or raises ValidationException with
per-field details. Runs before any store access.
"""

from typing import Any, Dict, List, Mapping, Type, TypeVar
from pydantic import BaseModel, ValidationError

from models.requests import CreateHelpRequestRequest, NearbyQueryRequest
from .errors import ValidationException, field_error

M = TypeVar('M', bound=BaseModel)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of formatted error dictionaries
    """
    errors = []

    for error in validation_error.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        value = error.get("input")
        errors.append(field_error(
            field_path,
            error["msg"],
            error["type"],
            value if isinstance(value, (str, int, float, bool, type(None))) else None
        ))

    return errors


def parse_model(model_class: Type[M], payload: Any, message: str) -> M:
    """Validate ``payload`` against ``model_class`` or raise ValidationException."""
    if not isinstance(payload, Mapping):
        raise ValidationException(
            message,
            [field_error("body", "Expected a JSON object", "type_error", None)]
        )

    try:
        return model_class.model_validate(dict(payload))
    except ValidationError as e:
        raise ValidationException(message, format_validation_errors(e))


def validate_create_payload(payload: Any) -> CreateHelpRequestRequest:
    """Validate a create-request payload."""
    return parse_model(CreateHelpRequestRequest, payload, "Invalid help request")


def validate_nearby_query(payload: Any) -> NearbyQueryRequest:
    """
    Validate a radius query.

    An omitted radius falls back to the default; an explicit null or a
    non-positive radius is rejected.
    """
    return parse_model(NearbyQueryRequest, payload, "Invalid nearby query")


def validate_identifier(value: Any, field: str) -> str:
    """Require a non-blank string identifier (request id, user id)."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(
            f"{field} is required",
            [field_error(field, f"{field} must be a non-empty string", "missing", value if isinstance(value, str) else None)]
        )
    return value.strip()
