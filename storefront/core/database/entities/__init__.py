"""
Database entity models.

This package contains all database entity models organized by business domain
and table relationships.

Modules:
- users: Store accounts and admin flag
- categories: Product categories
- products: Catalog products and customer reviews
- orders: Orders and their line items
"""

from . import categories, orders, products, users
from .categories import Category
from .orders import Order, OrderItem
from .products import Product, Review
from .users import User

__all__ = [
    "Category",
    "Order",
    "OrderItem",
    "Product",
    "Review",
    "User",
    "categories",
    "orders",
    "products",
    "users",
]
