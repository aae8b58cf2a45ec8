"""
Order Endpoints.

This module covers checkout, the eSewa payment callbacks, the customer's
own orders, admin order management and the dashboard aggregates.

Static paths (``/success``, ``/mine``, ``/total-sales`` ...) are declared
before ``/{order_id}`` so they are not captured by the id route.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, HTTPException, Query, status

from storefront.core.database.entities.orders import Order
from storefront.core.database.entities.users import User
from storefront.core.logging_config import get_logger
from storefront.core.models.io.orders import (
    EsewaRedirect,
    MarkPaidRequest,
    OrderCreate,
    OrderRead,
    PaymentConfirmation,
    PaymentResult,
    SalesByDate,
    TotalOrders,
    TotalSales,
)
from storefront.core.monitoring import log_error
from storefront.payments.esewa import EsewaApiError
from storefront.server.services.deps import AdminUserDep, CurrentUserDep, OrderServiceDep, ReposDep
from storefront.server.services.orders import (
    OrderService,
    PaymentVerificationError,
    ProductsNotFoundError,
)

logger = get_logger(__name__)

router = APIRouter()


async def _get_accessible_order(order_id: int, user: User, service: OrderService) -> Order:
    order = await service.repos.orders.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized to access this order")
    return order


@router.post(
    "",
    response_model=Union[EsewaRedirect, OrderRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Order",
    responses={400: {"description": "No order items"}, 404: {"description": "Unknown product"}},
)
async def create_order(
    payload: OrderCreate, user: CurrentUserDep, service: OrderServiceDep
) -> Union[EsewaRedirect, OrderRead]:
    """
    Place an order for the current user.

    Line prices come from the catalog; any price sent by the client is
    ignored. For eSewa orders the response carries the checkout URL the
    client should redirect to.
    """
    if not payload.order_items:
        raise HTTPException(status_code=400, detail="No order items")

    try:
        order, redirect_url = await service.place_order(user, payload)
    except ProductsNotFoundError as e:
        logger.info(f"Order by user {user.id} rejected: {e}")
        raise HTTPException(status_code=404, detail="One or more products not found.")

    order_read = await service.to_read(order)
    if redirect_url is None:
        return order_read
    return EsewaRedirect(
        message="Order created. Redirecting to eSewa.",
        esewa_url=redirect_url,
        order=order_read,
    )


@router.get(
    "/success",
    response_model=PaymentConfirmation,
    summary="eSewa Success Callback",
    responses={
        400: {"description": "Payment verification failed"},
        404: {"description": "Order not found"},
        502: {"description": "Error verifying payment"},
    },
)
async def esewa_success(
    service: OrderServiceDep,
    oid: str = Query(..., description="Order id"),
    amt: str = Query(..., description="Paid amount"),
    ref_id: str = Query(..., alias="refId", description="eSewa transaction reference"),
) -> PaymentConfirmation:
    """
    Verify an eSewa payment and mark the order paid.

    eSewa redirects the customer here after a successful checkout. The
    transaction is checked against the verification endpoint before the
    order is confirmed.
    """
    try:
        order = await service.verify_esewa_payment(oid, amt, ref_id)
    except PaymentVerificationError:
        raise HTTPException(status_code=400, detail="Payment verification failed")
    except EsewaApiError as e:
        log_error(
            error_type="EsewaApiError",
            error_message=str(e),
            context={"order_id": oid, "reference_id": ref_id, "status_code": e.status_code},
        )
        logger.error(f"eSewa verification for order {oid} failed: {e}")
        raise HTTPException(status_code=502, detail="Error verifying payment")

    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return PaymentConfirmation(message="Payment Successful", order=await service.to_read(order))


@router.get(
    "/failed",
    summary="eSewa Failure Callback",
    responses={400: {"description": "Payment failed or cancelled"}},
)
async def esewa_failed(pid: Optional[str] = None) -> None:
    logger.info(f"eSewa reported a failed or cancelled payment (pid={pid})")
    raise HTTPException(status_code=400, detail="Payment failed or cancelled")


@router.get("", response_model=List[OrderRead], summary="List All Orders (admin)")
async def list_orders(_: AdminUserDep, service: OrderServiceDep) -> List[OrderRead]:
    return await service.to_reads(await service.repos.orders.list())


@router.get("/mine", response_model=List[OrderRead], summary="List My Orders")
async def list_my_orders(user: CurrentUserDep, service: OrderServiceDep) -> List[OrderRead]:
    orders = await service.repos.orders.list_by_user(user.id)  # type: ignore[arg-type]
    return await service.to_reads(orders)


@router.get("/total-orders", response_model=TotalOrders, summary="Count Orders (admin)")
async def count_total_orders(_: AdminUserDep, repos: ReposDep) -> TotalOrders:
    return TotalOrders(total_orders=await repos.orders.count())


@router.get("/total-sales", response_model=TotalSales, summary="Total Sales (admin)")
async def calculate_total_sales(_: AdminUserDep, repos: ReposDep) -> TotalSales:
    """Sum of order totals across every order, paid or not."""
    return TotalSales(total_sales=await repos.orders.total_sales())


@router.get("/total-sales-by-date", response_model=List[SalesByDate], summary="Sales By Date (admin)")
async def calculate_total_sales_by_date(_: AdminUserDep, repos: ReposDep) -> List[SalesByDate]:
    return [SalesByDate.model_validate(row) for row in await repos.orders.sales_by_date()]


@router.get(
    "/{order_id}",
    response_model=OrderRead,
    summary="Get Order",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Order not found"}},
)
async def find_order_by_id(order_id: int, user: CurrentUserDep, service: OrderServiceDep) -> OrderRead:
    order = await _get_accessible_order(order_id, user, service)
    return await service.to_read(order, include_email=True)


@router.put(
    "/{order_id}/pay",
    response_model=OrderRead,
    summary="Mark Order Paid",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Order not found"}},
)
async def mark_order_as_paid(
    order_id: int, payload: MarkPaidRequest, user: CurrentUserDep, service: OrderServiceDep
) -> OrderRead:
    """
    Record an off-site payment.

    The provider's result is stored on the order and stock is taken out.
    Repeating the call for a paid order changes nothing.
    """
    order = await _get_accessible_order(order_id, user, service)
    result = PaymentResult(
        id=payload.id,
        status=payload.status,
        update_time=payload.update_time,
        email_address=payload.payer.email_address,
    )
    order = await service.confirm_payment(order, result)
    return await service.to_read(order, include_email=True)


@router.put(
    "/{order_id}/deliver",
    response_model=OrderRead,
    summary="Mark Order Delivered (admin)",
    responses={404: {"description": "Order not found"}},
)
async def mark_order_as_delivered(order_id: int, _: AdminUserDep, service: OrderServiceDep) -> OrderRead:
    order = await service.repos.orders.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    order = await service.mark_delivered(order)
    return await service.to_read(order, include_email=True)
