"""Shared pydantic base classes for the public API surface."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model emitting camelCase keys on the wire.

    Python code keeps snake_case attribute names; FastAPI serialises response
    models by alias, and ``populate_by_name`` lets services construct models
    with either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """Minimal acknowledgement returned by mutation endpoints."""

    success: bool = True
