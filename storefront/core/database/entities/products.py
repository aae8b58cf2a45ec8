"""
Product entity models.

This module contains the database entities for the catalog: products and
their customer reviews. ``rating`` and ``num_reviews`` on a product are
denormalized from its reviews and recomputed whenever a review is added.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Text

from ..base import Base, utc_now


class ProductBase(Base):
    """Base fields for product entity."""

    name: str = Field(max_length=255, index=True)
    image: str = Field(default="", max_length=512, description="Image path or URL")
    brand: str = Field(max_length=128)
    quantity: int = Field(default=0, description="Units per listing")
    category_id: int = Field(foreign_key="categories.id", index=True)
    description: str = Field(sa_type=Text)
    price: float = Field(default=0.0, ge=0)
    count_in_stock: int = Field(default=0, ge=0, description="Units available for sale")


class Product(ProductBase, table=True):
    """Catalog product.

    Table: products
    """

    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)

    rating: float = Field(default=0.0, index=True, description="Mean review rating")
    num_reviews: int = Field(default=0, description="Number of reviews")

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True), sa_column_kwargs={"onupdate": utc_now}
    )

    def __repr__(self) -> str:
        return f"Product(id={self.id}, name={self.name}, price={self.price})"


class Review(Base, table=True):
    """Customer review of a product. One per user and product.

    Table: product_reviews
    """

    __tablename__ = "product_reviews"
    __table_args__ = (UniqueConstraint("product_id", "user_id", name="uq_product_reviews_product_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    name: str = Field(max_length=128, description="Reviewer display name")
    rating: float = Field(ge=0, le=5)
    comment: str = Field(default="", sa_type=Text)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"Review(id={self.id}, product_id={self.product_id}, rating={self.rating})"
