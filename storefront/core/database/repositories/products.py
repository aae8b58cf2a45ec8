"""
Products repository.

This module provides data access operations for the catalog: paginated
keyword search, the storefront listings (newest, top rated), filtering by
category and price, and product reviews with their denormalized rating.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete as sa_delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.orders import OrderItem
from ..entities.products import Product, Review
from .base import AsyncBaseRepository, QueryBuilder


class ProductRepository(AsyncBaseRepository[Product]):
    """Repository for product data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Product)

    @staticmethod
    def _keyword_clause(keyword: Optional[str]):
        if not keyword:
            return None
        return func.lower(Product.name).contains(keyword.lower(), autoescape=True)

    async def search(
        self, keyword: Optional[str] = None, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Tuple[List[Product], int]:
        """Find products whose name contains ``keyword`` (case-insensitive).

        Args:
            keyword: Substring to match against the name; empty matches everything
            limit: Page size
            offset: Records to skip

        Returns:
            Tuple of the requested page and the total number of matches
        """
        clause = self._keyword_clause(keyword)

        count_stmt = select(func.count()).select_from(Product)
        stmt = select(Product).order_by(Product.id)  # type: ignore[arg-type]
        if clause is not None:
            count_stmt = count_stmt.where(clause)
            stmt = stmt.where(clause)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)

        total = (await self.session.execute(count_stmt)).scalar_one()
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), int(total)

    async def get_many(self, product_ids: Iterable[int]) -> List[Product]:
        ids = set(product_ids)
        if not ids:
            return []
        result = await self.session.execute(select(Product).where(Product.id.in_(ids)))  # type: ignore[union-attr]
        return list(result.scalars().all())

    async def latest(self, limit: int) -> List[Product]:
        """Most recently created products first."""
        stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc()).limit(limit)  # type: ignore[attr-defined,union-attr]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def newest(self, limit: int) -> List[Product]:
        """Products in reverse insertion order."""
        stmt = select(Product).order_by(Product.id.desc()).limit(limit)  # type: ignore[union-attr]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def top_rated(self, limit: int) -> List[Product]:
        stmt = select(Product).order_by(Product.rating.desc(), Product.id).limit(limit)  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def filter(
        self, category_ids: Sequence[int] = (), price_range: Sequence[float] = ()
    ) -> List[Product]:
        """Filter products by category membership and an inclusive price range.

        Args:
            category_ids: Categories to include; empty disables the filter
            price_range: ``(min, max)``; empty disables the filter

        Returns:
            Matching products
        """
        stmt = select(Product).order_by(Product.id)  # type: ignore[arg-type]
        if category_ids:
            stmt = stmt.where(Product.category_id.in_(list(category_ids)))  # type: ignore[attr-defined]
        if price_range:
            low, high = price_range[0], price_range[-1]
            stmt = stmt.where(Product.price >= low, Product.price <= high)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_reviews(self, product_id: int) -> List[Review]:
        stmt = select(Review).where(Review.product_id == product_id).order_by(Review.id)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_review_by_user(self, product_id: int, user_id: int) -> Optional[Review]:
        stmt = select(Review).where(Review.product_id == product_id, Review.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_review(self, product: Product, review: Review) -> Product:
        """Attach a review and recompute the product's rating and review count.

        Both writes are committed together.
        """
        review.product_id = product.id  # type: ignore[assignment]
        self.session.add(review)
        await self.session.flush()

        stmt = select(func.count(Review.id), func.avg(Review.rating)).where(Review.product_id == product.id)
        count, average = (await self.session.execute(stmt)).one()
        product.num_reviews = int(count)
        product.rating = float(average or 0.0)
        self.session.add(product)

        await self.session.commit()
        await self.session.refresh(product)
        return product

    async def delete(self, entity_id: int) -> bool:
        """Delete a product with its reviews.

        Order lines that referenced the product keep their snapshot of name,
        image and price but lose the product link.
        """
        product = await self.get_by_id(entity_id)
        if product is None:
            return False
        await self.session.execute(sa_delete(Review).where(Review.product_id == entity_id))
        await self.session.execute(
            update(OrderItem).where(OrderItem.product_id == entity_id).values(product_id=None)
        )
        await self.session.delete(product)
        await self.session.commit()
        return True
