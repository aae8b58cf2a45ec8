"""
Shared configuration for API I/O models.

Responses are serialized with camelCase keys (``isAdmin``, ``countInStock``)
while Python code uses snake_case. Requests accept either spelling.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model for API payloads with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(BaseModel):
    """Plain acknowledgement payload."""

    message: str
