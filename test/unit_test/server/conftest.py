from typing import AsyncGenerator, Callable, Dict, List, Optional
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database.entities.categories import Category
from storefront.core.database.entities.products import Product
from storefront.core.database.entities.users import User
from storefront.core.database.utils import create_all, create_engine, create_sessionmaker
from storefront.payments.esewa import EsewaClient

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ESEWA_SUCCESS_BODY = "<response>\n<response_code>Success</response_code>\n</response>"


class FakeEsewaGateway:
    """Stands in for the eSewa verification endpoint through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body = ESEWA_SUCCESS_BODY
        self.error: Optional[Exception] = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    def client(self) -> EsewaClient:
        return EsewaClient(
            payment_url="http://mock-esewa/epay/main",
            verify_url="http://mock-esewa/epay/transrec",
            merchant_code="EPAYTEST",
            client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(TEST_DATABASE_URL)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
def esewa_gateway() -> FakeEsewaGateway:
    return FakeEsewaGateway()


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession, esewa_gateway: FakeEsewaGateway) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from storefront.core.database.session import get_session
    from storefront.server.main import app
    from storefront.server.services.deps import get_esewa_client

    esewa_client = esewa_gateway.client()

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_esewa_client] = lambda: esewa_client

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("storefront.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
    await esewa_client.aclose()


@pytest.fixture
def make_user(session: AsyncSession) -> Callable:
    from storefront.server.services.security import hash_password

    async def _make_user(
        username: str = "alice", email: str = "alice@example.com", password: str = "secret123", is_admin: bool = False
    ) -> User:
        user = User(username=username, email=email, password=hash_password(password), is_admin=is_admin)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make_user


@pytest_asyncio.fixture
async def customer(make_user) -> User:
    return await make_user()


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(username="admin", email="admin@example.com", password="adminpass", is_admin=True)


def bearer(user: User) -> Dict[str, str]:
    from storefront.server.services.security import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def customer_headers(customer: User) -> Dict[str, str]:
    return bearer(customer)


@pytest.fixture
def admin_headers(admin: User) -> Dict[str, str]:
    return bearer(admin)


@pytest_asyncio.fixture
async def category(session: AsyncSession) -> Category:
    category = Category(name="Laptops")
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return category


@pytest.fixture
def make_product(session: AsyncSession, category: Category) -> Callable:
    async def _make_product(name: str = "ThinkPad", price: float = 40.0, count_in_stock: int = 5, **fields) -> Product:
        product = Product(
            name=name,
            brand=fields.pop("brand", "Lenovo"),
            description=fields.pop("description", "A laptop"),
            price=price,
            count_in_stock=count_in_stock,
            quantity=fields.pop("quantity", 1),
            category_id=fields.pop("category_id", category.id),
            image=fields.pop("image", "/uploads/thinkpad.png"),
            **fields,
        )
        session.add(product)
        await session.commit()
        await session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    return bearer
