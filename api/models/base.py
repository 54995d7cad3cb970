# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Model whose serialized field names are camelCase, as stored in MongoDB."""

    model_config = ConfigDict(
        # Accept both snake_case attribute names and camelCase document keys
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True
    )


class BaseEntity(CamelModel):
    """Base entity with common fields for all persisted domain objects."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=True,
        validate_assignment=True
    )

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update timestamp")

    def to_document(self) -> dict:
        """Serialize to a camelCase document suitable for the store."""
        return self.model_dump(by_alias=True)
