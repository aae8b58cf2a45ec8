"""
Category entity models.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from ..base import Base


class Category(Base, table=True):
    """Product category.

    Table: categories
    """

    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=32, unique=True, index=True)

    def __repr__(self) -> str:
        return f"Category(id={self.id}, name={self.name})"
