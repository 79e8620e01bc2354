"""Base schema configuration for API models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIBaseSchema(BaseModel):
    """API models: snake_case in Python, camelCase on the wire.

    from_attributes lets routes validate domain models (ExclusionEntry,
    TraceEntry) straight into responses.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
