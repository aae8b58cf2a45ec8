"""
Orders repository.

This module provides data access operations for orders and their line
items, the admin sales aggregates, and the two status transitions
(paid, delivered).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import utc_now
from ..entities.orders import Order, OrderItem
from ..entities.products import Product
from .base import AsyncBaseRepository


class OrderRepository(AsyncBaseRepository[Order]):
    """Repository for order data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Order)

    async def create_with_items(self, order: Order, items: Iterable[OrderItem]) -> Order:
        """Persist an order together with its line items in one commit.

        Args:
            order: Order to insert
            items: Line items; their ``order_id`` is filled in here

        Returns:
            The persisted order
        """
        self.session.add(order)
        await self.session.flush()
        for item in items:
            item.order_id = order.id  # type: ignore[assignment]
            self.session.add(item)
        await self.session.commit()
        await self.session.refresh(order)
        return order

    async def get_items(self, order_ids: Iterable[int]) -> Dict[int, List[OrderItem]]:
        """Load line items for several orders, keyed by order id."""
        ids = set(order_ids)
        grouped: Dict[int, List[OrderItem]] = {order_id: [] for order_id in ids}
        if not ids:
            return grouped
        stmt = select(OrderItem).where(OrderItem.order_id.in_(ids)).order_by(OrderItem.id)  # type: ignore[attr-defined,arg-type]
        result = await self.session.execute(stmt)
        for item in result.scalars().all():
            grouped[item.order_id].append(item)
        return grouped

    async def list_by_user(self, user_id: int) -> List[Order]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.id)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def total_sales(self) -> float:
        """Sum of ``total_price`` across every order."""
        result = await self.session.execute(select(func.coalesce(func.sum(Order.total_price), 0.0)))
        return round(float(result.scalar_one()), 2)

    async def sales_by_date(self) -> List[Dict[str, Any]]:
        """Total of paid orders grouped by the day they were paid.

        Returns:
            ``[{"date": "YYYY-MM-DD", "total_sales": float}]`` sorted by date
        """
        stmt = select(Order.paid_at, Order.total_price).where(Order.is_paid == True)  # noqa: E712
        result = await self.session.execute(stmt)
        totals: Dict[str, float] = defaultdict(float)
        for paid_at, total_price in result.all():
            if paid_at is None:
                continue
            totals[paid_at.strftime("%Y-%m-%d")] += total_price
        return [{"date": day, "total_sales": round(total, 2)} for day, total in sorted(totals.items())]

    async def mark_paid(
        self,
        order: Order,
        payment_result: Optional[Dict[str, Any]] = None,
        paid_at: Optional[datetime] = None,
    ) -> Order:
        """Mark an order paid and take its quantities out of stock.

        The order is claimed with a conditional update on ``is_paid``, so only
        one of several concurrent confirmations decrements stock. The flag,
        the payment result and every stock decrement are committed together.
        An order that is already paid is returned unchanged.

        Args:
            order: The order to confirm
            payment_result: Provider-specific payment details to store
            paid_at: Payment time; defaults to now

        Returns:
            The order as stored after the confirmation
        """
        if order.is_paid:
            return order

        values: Dict[str, Any] = {"is_paid": True, "paid_at": paid_at or utc_now()}
        if payment_result is not None:
            values["payment_result"] = payment_result
        claim = (
            update(Order)
            .where(Order.id == order.id, Order.is_paid == False)  # noqa: E712
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if (await self.session.execute(claim)).rowcount != 1:
            # Confirmed elsewhere in the meantime
            await self.session.commit()
            await self.session.refresh(order)
            return order

        items = (await self.get_items([order.id]))[order.id]  # type: ignore[list-item,index]
        quantities: Dict[int, int] = defaultdict(int)
        for item in items:
            if item.product_id is not None:
                quantities[item.product_id] += item.qty
        for product_id, qty in quantities.items():
            await self.session.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(
                    count_in_stock=case(
                        (Product.count_in_stock > qty, Product.count_in_stock - qty),
                        else_=0,
                    )
                )
                .execution_options(synchronize_session=False)
            )

        await self.session.commit()
        await self.session.refresh(order)
        if quantities:
            # Bring products already loaded in this session up to date
            stmt = (
                select(Product)
                .where(Product.id.in_(list(quantities)))  # type: ignore[union-attr]
                .execution_options(populate_existing=True)
            )
            (await self.session.execute(stmt)).scalars().all()
        return order

    async def mark_delivered(self, order: Order, delivered_at: Optional[datetime] = None) -> Order:
        order.is_delivered = True
        order.delivered_at = delivered_at or utc_now()
        return await self.update(order)
