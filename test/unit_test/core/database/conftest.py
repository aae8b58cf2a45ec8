from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database.entities.categories import Category
from storefront.core.database.entities.users import User
from storefront.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from storefront.core.database.utils import create_all, create_engine, create_sessionmaker


@pytest_asyncio.fixture
async def db_engine():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(db_engine)() as session:
        yield session


@pytest_asyncio.fixture
async def repos(db_session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=db_session)


@pytest_asyncio.fixture
async def shopper(repos: SqlRepoBundle) -> User:
    return await repos.users.create(User(username="bob", email="Bob@Example.com", password="hash"))


@pytest_asyncio.fixture
async def laptops(repos: SqlRepoBundle) -> Category:
    return await repos.categories.create(Category(name="Laptops"))
