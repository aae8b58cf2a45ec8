"""
Order I/O models for API requests and responses.

This module contains Pydantic-based I/O schemas for the order endpoints,
including the eSewa redirect envelope returned when an order is placed with
that payment method, and the admin sales aggregates.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import CamelModel
from .users import UserSummary


class ShippingAddress(CamelModel):
    address: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=128)
    postal_code: str = Field(default="", max_length=32)
    country: str = Field(default="", max_length=128)


class PaymentResult(CamelModel):
    """Payment details reported by the payment provider."""

    id: Optional[str] = None
    status: Optional[str] = None
    update_time: Optional[str] = None
    email_address: Optional[str] = None


class OrderItemCreate(CamelModel):
    """Line item as sent by the client. Any client price is ignored."""

    model_config = ConfigDict(extra="ignore")

    product: int = Field(description="Product id")
    qty: int = Field(ge=1)
    name: Optional[str] = None
    image: Optional[str] = None


class OrderItemRead(CamelModel):
    name: str
    qty: int
    image: str
    price: float
    product: Optional[int] = Field(default=None, validation_alias="product_id", description="Product id, unset once the product is deleted")


class OrderCreate(CamelModel):
    """Checkout payload."""

    order_items: List[OrderItemCreate] = Field(default_factory=list)
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    payment_method: str = Field(default="esewa", max_length=64)


class OrderRead(CamelModel):
    """Schema for reading an order."""

    id: int
    user: Optional[UserSummary] = None
    order_items: List[OrderItemRead] = Field(default_factory=list)
    shipping_address: ShippingAddress
    payment_method: str
    payment_result: Optional[PaymentResult] = None
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_delivered: bool
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class EsewaRedirect(CamelModel):
    """Response to an eSewa checkout: where to send the customer."""

    message: str
    esewa_url: str
    order: OrderRead


class PaymentConfirmation(CamelModel):
    message: str
    order: OrderRead


class PayerInfo(BaseModel):
    email_address: Optional[str] = None


class MarkPaidRequest(BaseModel):
    """Payment result pushed by the client after an off-site payment."""

    id: Optional[str] = None
    status: Optional[str] = None
    update_time: Optional[str] = None
    payer: PayerInfo = Field(default_factory=PayerInfo)


class TotalOrders(CamelModel):
    total_orders: int


class TotalSales(CamelModel):
    total_sales: float


class SalesByDate(CamelModel):
    """Paid sales for one day, keyed by ``_id`` like the dashboard expects."""

    date: str = Field(serialization_alias="_id", validation_alias="date")
    total_sales: float
