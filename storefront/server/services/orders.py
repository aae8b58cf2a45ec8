"""
Order Service.

Coordinates checkout and payment on top of the repositories:

- pricing an order from database prices (``calc_prices``);
- placing an order and, for eSewa, building the checkout redirect;
- verifying an eSewa callback and confirming the payment;
- assembling order read models with their items and owner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from storefront.core.database.entities.orders import Order, OrderItem
from storefront.core.database.entities.users import User
from storefront.core.database.repositories import SqlRepoBundle
from storefront.core.logging_config import get_logger
from storefront.core.models.io.orders import OrderCreate, OrderItemRead, OrderRead, PaymentResult
from storefront.core.models.io.users import UserSummary
from storefront.core.monitoring import log_order_event
from storefront.payments.esewa import EsewaClient
from storefront.payments.esewa.client import format_amount
from storefront.server.core.config import Settings, settings as default_settings

logger = get_logger(__name__)

ESEWA_METHOD = "esewa"
FREE_SHIPPING_THRESHOLD = 100.0
FLAT_SHIPPING = 10.0
TAX_RATE = 0.15


@dataclass(frozen=True)
class OrderPrices:
    items_price: float
    shipping_price: float
    tax_price: float
    total_price: float


def calc_prices(lines: Iterable[Tuple[float, int]]) -> OrderPrices:
    """Price an order from ``(unit_price, qty)`` lines.

    Shipping is free above the threshold and flat otherwise; tax is a fixed
    rate on the items subtotal. Every component is rounded to cents.
    """
    items_price = round(sum(price * qty for price, qty in lines), 2)
    shipping_price = 0.0 if items_price > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING
    tax_price = round(items_price * TAX_RATE, 2)
    total_price = round(items_price + shipping_price + tax_price, 2)
    return OrderPrices(
        items_price=items_price,
        shipping_price=shipping_price,
        tax_price=tax_price,
        total_price=total_price,
    )


class ProductsNotFoundError(LookupError):
    """Raised when an order references products that do not exist."""

    def __init__(self, product_ids: Sequence[int]) -> None:
        super().__init__(f"Products not found: {sorted(product_ids)}")
        self.product_ids = list(product_ids)


class PaymentVerificationError(Exception):
    """Raised when eSewa does not confirm a transaction."""


class OrderService:
    """Checkout and payment workflows."""

    def __init__(self, repos: SqlRepoBundle, esewa: EsewaClient, settings: Optional[Settings] = None) -> None:
        self.repos = repos
        self.esewa = esewa
        self.settings = settings or default_settings

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    async def to_reads(self, orders: Sequence[Order], *, include_email: bool = False) -> List[OrderRead]:
        """Build read models for ``orders`` with their items and owners loaded in bulk."""
        if not orders:
            return []
        items = await self.repos.orders.get_items(o.id for o in orders)  # type: ignore[misc]
        owners: Dict[int, User] = {}
        for user_id in {o.user_id for o in orders if o.user_id is not None}:
            user = await self.repos.users.get_by_id(user_id)
            if user is not None:
                owners[user_id] = user

        reads = []
        for order in orders:
            owner = owners.get(order.user_id) if order.user_id is not None else None
            summary = None
            if owner is not None:
                summary = UserSummary(
                    id=owner.id,  # type: ignore[arg-type]
                    username=owner.username,
                    email=owner.email if include_email else None,
                )
            reads.append(
                OrderRead.model_validate(
                    {
                        **order.model_dump(exclude={"user_id"}),
                        "user": summary,
                        "order_items": [OrderItemRead.model_validate(i) for i in items.get(order.id, [])],  # type: ignore[arg-type]
                    }
                )
            )
        return reads

    async def to_read(self, order: Order, *, include_email: bool = False) -> OrderRead:
        return (await self.to_reads([order], include_email=include_email))[0]

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    async def place_order(self, user: User, payload: OrderCreate) -> Tuple[Order, Optional[str]]:
        """Create an order priced from the catalog.

        Args:
            user: The customer placing the order
            payload: Items, shipping address and payment method

        Returns:
            The persisted order and, for eSewa orders, the checkout URL

        Raises:
            ProductsNotFoundError: If any line references an unknown product
        """
        requested = {line.product for line in payload.order_items}
        products = {p.id: p for p in await self.repos.products.get_many(requested)}
        missing = requested - products.keys()
        if missing:
            raise ProductsNotFoundError(list(missing))

        items = []
        for line in payload.order_items:
            product = products[line.product]
            items.append(
                OrderItem(
                    product_id=line.product,
                    name=line.name or product.name,
                    qty=line.qty,
                    image=line.image or product.image,
                    price=product.price,
                )
            )
        prices = calc_prices((item.price, item.qty) for item in items)

        order = Order(
            user_id=user.id,  # type: ignore[arg-type]
            shipping_address=payload.shipping_address.model_dump(),
            payment_method=payload.payment_method,
            items_price=prices.items_price,
            tax_price=prices.tax_price,
            shipping_price=prices.shipping_price,
            total_price=prices.total_price,
        )
        order = await self.repos.orders.create_with_items(order, items)
        logger.info(f"Order {order.id} placed by user {user.id}: total={order.total_price} via {order.payment_method}")
        log_order_event("created", order.id, total_price=order.total_price, payment_method=order.payment_method)  # type: ignore[arg-type]

        redirect_url = None
        if order.payment_method == ESEWA_METHOD:
            redirect_url = self.esewa.build_payment_url(
                amount=order.total_price,
                order_id=order.id,  # type: ignore[arg-type]
                success_url=self.settings.callback_url("/api/orders/success"),
                failure_url=self.settings.callback_url("/api/orders/failed"),
            )
        return order, redirect_url

    # ------------------------------------------------------------------
    # Payment
    # ------------------------------------------------------------------

    async def confirm_payment(self, order: Order, payment_result: Optional[PaymentResult] = None) -> Order:
        """Mark ``order`` paid and decrement stock. Already-paid orders are left alone."""
        if order.is_paid:
            logger.info(f"Order {order.id} is already paid; skipping confirmation")
            return order
        result = payment_result.model_dump() if payment_result is not None else None
        order = await self.repos.orders.mark_paid(order, result)
        log_order_event("paid", order.id, total_price=order.total_price)  # type: ignore[arg-type]
        return order

    async def verify_esewa_payment(self, order_id: str, amount: str, reference_id: str) -> Optional[Order]:
        """Verify an eSewa success callback and confirm the order.

        Args:
            order_id: ``oid`` from the callback
            amount: ``amt`` from the callback
            reference_id: ``refId`` from the callback

        Returns:
            The paid order, or None if no such order exists

        Raises:
            PaymentVerificationError: If eSewa rejects the transaction or the
                amount does not match the order total
            EsewaApiError: If the verification endpoint cannot be reached
        """
        verified = await self.esewa.verify(amount=amount, order_id=order_id, reference_id=reference_id)
        if not verified:
            logger.warning(f"eSewa did not confirm payment for order {order_id} (ref={reference_id})")
            raise PaymentVerificationError("Payment verification failed")

        try:
            order = await self.repos.orders.get_by_id(int(order_id))
        except ValueError:
            return None
        if order is None:
            return None

        try:
            paid_amount = float(amount)
        except ValueError:
            raise PaymentVerificationError("Payment verification failed")
        if format_amount(paid_amount) != format_amount(order.total_price):
            logger.warning(f"eSewa amount {amount} does not match order {order.id} total {order.total_price}")
            raise PaymentVerificationError("Payment verification failed")

        return await self.confirm_payment(
            order,
            PaymentResult(id=reference_id, status="COMPLETE", update_time=None, email_address=None),
        )

    async def mark_delivered(self, order: Order) -> Order:
        order = await self.repos.orders.mark_delivered(order)
        log_order_event("delivered", order.id)  # type: ignore[arg-type]
        return order
