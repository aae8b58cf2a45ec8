"""
I/O models for API requests and responses.

These schemas are separate from the database entities so the API contract
can evolve independently of the tables.
"""

from .base import CamelModel, MessageResponse
from .categories import CategoryRead, CategoryWrite
from .orders import (
    EsewaRedirect,
    MarkPaidRequest,
    OrderCreate,
    OrderItemCreate,
    OrderItemRead,
    OrderRead,
    PaymentConfirmation,
    PaymentResult,
    SalesByDate,
    ShippingAddress,
    TotalOrders,
    TotalSales,
)
from .products import (
    ProductDetail,
    ProductFilter,
    ProductPage,
    ProductRead,
    ProductWithCategory,
    ReviewCreate,
    ReviewRead,
)
from .users import (
    ProfileUpdate,
    UserAdminUpdate,
    UserDetail,
    UserLogin,
    UserRead,
    UserRegister,
    UserSummary,
)

__all__ = [
    "CamelModel",
    "CategoryRead",
    "CategoryWrite",
    "EsewaRedirect",
    "MarkPaidRequest",
    "MessageResponse",
    "OrderCreate",
    "OrderItemCreate",
    "OrderItemRead",
    "OrderRead",
    "PaymentConfirmation",
    "PaymentResult",
    "ProductDetail",
    "ProductFilter",
    "ProductPage",
    "ProductRead",
    "ProductWithCategory",
    "ProfileUpdate",
    "ReviewCreate",
    "ReviewRead",
    "SalesByDate",
    "ShippingAddress",
    "TotalOrders",
    "TotalSales",
    "UserAdminUpdate",
    "UserDetail",
    "UserLogin",
    "UserRead",
    "UserRegister",
    "UserSummary",
]
