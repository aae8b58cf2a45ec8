"""
Repository layer.

Data access objects organized by table/business domain. Every repository
wraps one ``AsyncSession``; use ``build_sql_repos_from_session`` to get
them all bound to the same session.
"""

from .base import AsyncBaseRepository, QueryBuilder
from .bundle import SqlRepoBundle, build_sql_repos_from_session
from .categories import CategoryRepository
from .orders import OrderRepository
from .products import ProductRepository
from .users import UserRepository

__all__ = [
    "AsyncBaseRepository",
    "CategoryRepository",
    "OrderRepository",
    "ProductRepository",
    "QueryBuilder",
    "SqlRepoBundle",
    "UserRepository",
    "build_sql_repos_from_session",
]
