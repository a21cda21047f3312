"""Shared schema bases.

Request and response bodies use camelCase keys on the wire and snake_case
attributes in Python.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelRequest(BaseModel):
    """Base for request bodies; unknown keys are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class CamelResponse(BaseModel):
    """Base for response bodies built from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelResponse):
    """Plain acknowledgement."""

    success: bool = True
    message: str
