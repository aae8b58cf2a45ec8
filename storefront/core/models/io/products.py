"""
Product I/O models for API requests and responses.

This module contains Pydantic-based I/O schemas for the catalog endpoints:
product reads (with or without reviews and the embedded category), the
paginated search page, reviews and the category/price filter payload.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel
from .categories import CategoryRead


class ReviewRead(CamelModel):
    """A customer review as shown on the product page."""

    id: int
    name: str
    rating: float
    comment: str
    user: int = Field(validation_alias="user_id", description="Reviewer user id")
    created_at: datetime


class ReviewCreate(CamelModel):
    """Review payload."""

    rating: float = Field(ge=1, le=5)
    comment: str = Field(default="", max_length=2000)


class ProductRead(CamelModel):
    """Schema for reading a product."""

    id: int
    name: str
    image: str
    brand: str
    quantity: int
    category: int = Field(validation_alias="category_id", description="Category id")
    description: str
    rating: float
    num_reviews: int
    price: float
    count_in_stock: int
    created_at: datetime
    updated_at: datetime


class ProductDetail(ProductRead):
    """Single product with its reviews."""

    reviews: List[ReviewRead] = Field(default_factory=list)


class ProductWithCategory(ProductRead):
    """Product with its category embedded instead of just the id."""

    category: Optional[CategoryRead] = None  # type: ignore[assignment]


class ProductPage(CamelModel):
    """One page of keyword search results."""

    products: List[ProductRead]
    page: int
    pages: int
    has_more: bool


class ProductFilter(CamelModel):
    """Storefront filter: checked category ids and a ``[min, max]`` price radio."""

    checked: List[int] = Field(default_factory=list)
    radio: List[float] = Field(default_factory=list, max_length=2)
