from datetime import datetime, timezone

import pytest
import pytest_asyncio

from storefront.core.database.entities.categories import Category
from storefront.core.database.entities.orders import Order, OrderItem
from storefront.core.database.entities.products import Product
from storefront.core.database.entities.users import User
from storefront.core.database.repositories import build_sql_repos_from_session
from storefront.core.database.utils import create_all, create_engine, create_sessionmaker


@pytest_asyncio.fixture
async def stocked(repos, laptops):
    return await repos.products.create(
        Product(name="ThinkPad", brand="Lenovo", description="d", category_id=laptops.id, price=50, count_in_stock=3)
    )


async def _place(repos, user_id, product, qty=1, total=50.0):
    return await repos.orders.create_with_items(
        Order(user_id=user_id, payment_method="esewa", items_price=total, total_price=total),
        [OrderItem(product_id=product.id, name=product.name, qty=qty, price=product.price)],
    )


async def test_create_with_items(repos, shopper, stocked):
    order = await _place(repos, shopper.id, stocked, qty=2)
    assert order.id is not None
    items = await repos.orders.get_items([order.id, 999])
    assert [(i.product_id, i.qty) for i in items[order.id]] == [(stocked.id, 2)]
    assert items[999] == []


async def test_list_by_user(repos, shopper, stocked):
    first = await _place(repos, shopper.id, stocked)
    second = await _place(repos, shopper.id, stocked)
    await _place(repos, None, stocked)
    assert [o.id for o in await repos.orders.list_by_user(shopper.id)] == [first.id, second.id]


async def test_total_sales_counts_every_order(repos, shopper, stocked):
    assert await repos.orders.total_sales() == 0
    await _place(repos, shopper.id, stocked, total=10.25)
    order = await _place(repos, shopper.id, stocked, total=20.5)
    await repos.orders.mark_paid(order)
    assert await repos.orders.total_sales() == pytest.approx(30.75)


async def test_sales_by_date_groups_paid_orders(repos, shopper, stocked):
    day_one = await _place(repos, shopper.id, stocked, total=10)
    day_one_again = await _place(repos, shopper.id, stocked, total=5)
    day_two = await _place(repos, shopper.id, stocked, total=7)
    await _place(repos, shopper.id, stocked, total=100)

    await repos.orders.mark_paid(day_one, paid_at=datetime(2026, 5, 1, 9, tzinfo=timezone.utc))
    await repos.orders.mark_paid(day_one_again, paid_at=datetime(2026, 5, 1, 22, tzinfo=timezone.utc))
    await repos.orders.mark_paid(day_two, paid_at=datetime(2026, 5, 2, 8, tzinfo=timezone.utc))

    assert await repos.orders.sales_by_date() == [
        {"date": "2026-05-01", "total_sales": 15.0},
        {"date": "2026-05-02", "total_sales": 7.0},
    ]


class TestMarkPaid:
    async def test_sets_flags_and_decrements_stock(self, repos, shopper, stocked):
        order = await _place(repos, shopper.id, stocked, qty=2)
        order = await repos.orders.mark_paid(order, payment_result={"id": "ref-1", "status": "COMPLETE"})

        assert order.is_paid is True
        assert order.paid_at is not None
        assert order.payment_result["id"] == "ref-1"
        assert (await repos.products.get_by_id(stocked.id)).count_in_stock == 1

    async def test_is_idempotent(self, repos, shopper, stocked):
        order = await _place(repos, shopper.id, stocked, qty=1)
        order = await repos.orders.mark_paid(order)
        paid_at = order.paid_at
        order = await repos.orders.mark_paid(order, payment_result={"id": "again"})

        assert order.paid_at == paid_at
        assert order.payment_result is None
        assert (await repos.products.get_by_id(stocked.id)).count_in_stock == 2

    async def test_stock_never_goes_negative(self, repos, shopper, stocked):
        order = await _place(repos, shopper.id, stocked, qty=10)
        await repos.orders.mark_paid(order)
        assert (await repos.products.get_by_id(stocked.id)).count_in_stock == 0

    async def test_skips_lines_without_product(self, repos, db_session, shopper, stocked):
        order = await repos.orders.create_with_items(
            Order(user_id=shopper.id, payment_method="esewa"),
            [OrderItem(product_id=None, name="Gone", qty=1, price=5)],
        )
        order = await repos.orders.mark_paid(order)
        assert order.is_paid is True
        assert (await repos.products.get_by_id(stocked.id)).count_in_stock == 3


async def test_mark_delivered(repos, shopper, stocked):
    order = await _place(repos, shopper.id, stocked)
    order = await repos.orders.mark_delivered(order, delivered_at=datetime(2026, 6, 1, tzinfo=timezone.utc))
    assert order.is_delivered is True
    assert order.delivered_at.replace(tzinfo=None) == datetime(2026, 6, 1)


async def test_overlapping_confirmations_take_stock_once(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await create_all(engine)
    make_session = create_sessionmaker(engine)
    try:
        async with make_session() as setup:
            repos = build_sql_repos_from_session(session=setup)
            user = await repos.users.create(User(username="bob", email="bob@example.com", password="hash"))
            category = await repos.categories.create(Category(name="Laptops"))
            product = await repos.products.create(
                Product(name="ThinkPad", brand="Lenovo", description="d", category_id=category.id, count_in_stock=10)
            )
            order = await _place(repos, user.id, product, qty=2)
            product_id, order_id = product.id, order.id

        async with make_session() as first, make_session() as second:
            first_repos = build_sql_repos_from_session(session=first)
            second_repos = build_sql_repos_from_session(session=second)
            first_copy = await first_repos.orders.get_by_id(order_id)
            second_copy = await second_repos.orders.get_by_id(order_id)
            assert first_copy.is_paid is False and second_copy.is_paid is False

            await first_repos.orders.mark_paid(first_copy, payment_result={"id": "first"})
            confirmed = await second_repos.orders.mark_paid(second_copy, payment_result={"id": "second"})

            assert confirmed.is_paid is True
            assert confirmed.payment_result == {"id": "first"}

        async with make_session() as check:
            stored = await build_sql_repos_from_session(session=check).products.get_by_id(product_id)
            assert stored.count_in_stock == 8
    finally:
        await engine.dispose()
