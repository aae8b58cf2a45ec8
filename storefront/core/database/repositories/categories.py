"""
Categories repository.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.categories import Category
from .base import AsyncBaseRepository


class CategoryRepository(AsyncBaseRepository[Category]):
    """Repository for category data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Category)

    async def get_by_name(self, name: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.name == name))
        return result.scalars().first()

    async def get_many(self, category_ids: Iterable[int]) -> List[Category]:
        ids = set(category_ids)
        if not ids:
            return []
        result = await self.session.execute(select(Category).where(Category.id.in_(ids)))  # type: ignore[union-attr]
        return list(result.scalars().all())
