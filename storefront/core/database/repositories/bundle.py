"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
bound to one session, so a request handler shares a single unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .categories import CategoryRepository
from .orders import OrderRepository
from .products import ProductRepository
from .users import UserRepository


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    users: UserRepository
    categories: CategoryRepository
    products: ProductRepository
    orders: OrderRepository


def build_sql_repos_from_session(*, session: AsyncSession) -> SqlRepoBundle:
    """Build a SqlRepoBundle from an existing session.

    Args:
        session: Async session shared by every repository

    Returns:
        Bundle containing all repository instances
    """
    return SqlRepoBundle(
        users=UserRepository(session),
        categories=CategoryRepository(session),
        products=ProductRepository(session),
        orders=OrderRepository(session),
    )
