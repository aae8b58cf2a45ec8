"""
Users repository.

Data access for store accounts.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete as sa_delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.orders import Order
from ..entities.products import Review
from ..entities.users import User
from .base import AsyncBaseRepository


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Look a user up by email, ignoring case."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def delete(self, entity_id: int) -> bool:
        """Delete a user and their reviews. Their orders are kept without an owner."""
        user = await self.get_by_id(entity_id)
        if user is None:
            return False
        await self.session.execute(sa_delete(Review).where(Review.user_id == entity_id))
        await self.session.execute(update(Order).where(Order.user_id == entity_id).values(user_id=None))
        await self.session.delete(user)
        await self.session.commit()
        return True
