"""
Category I/O models for API requests and responses.
"""

from __future__ import annotations

from pydantic import Field

from .base import CamelModel


class CategoryRead(CamelModel):
    id: int
    name: str


class CategoryWrite(CamelModel):
    """Create/update payload. Blank names are rejected by the endpoint."""

    name: str = Field(default="", max_length=32)
