"""
Order entity models.

This module contains the database entities for customer orders and their
line items. Order status is carried by two flags, ``is_paid`` and
``is_delivered``, each with the timestamp at which it was set. Shipping
address and the payment provider's result are stored as JSON documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class Order(Base, table=True):
    """Customer order.

    Table: orders
    """

    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    shipping_address: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    payment_method: str = Field(max_length=64)
    payment_result: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    items_price: float = Field(default=0.0)
    tax_price: float = Field(default=0.0)
    shipping_price: float = Field(default=0.0)
    total_price: float = Field(default=0.0)

    is_paid: bool = Field(default=False, index=True)
    paid_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    is_delivered: bool = Field(default=False)
    delivered_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True), sa_column_kwargs={"onupdate": utc_now}
    )

    def __repr__(self) -> str:
        return f"Order(id={self.id}, user_id={self.user_id}, total={self.total_price}, paid={self.is_paid})"


class OrderItem(Base, table=True):
    """Line item of an order. ``price`` is the unit price at order time.

    Table: order_items
    """

    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    product_id: Optional[int] = Field(default=None, foreign_key="products.id", index=True)

    name: str = Field(max_length=255)
    qty: int = Field(ge=1)
    image: str = Field(default="", max_length=512)
    price: float = Field(ge=0)

    def __repr__(self) -> str:
        return f"OrderItem(order_id={self.order_id}, product_id={self.product_id}, qty={self.qty})"
