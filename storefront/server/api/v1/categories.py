"""
Category Endpoints.

Public listing and lookup of product categories; creation, renaming and
removal are admin only.
"""

from typing import List

from fastapi import APIRouter, HTTPException, status

from storefront.core.database.entities.categories import Category
from storefront.core.models.io.categories import CategoryRead, CategoryWrite
from storefront.server.services.deps import AdminUserDep, ReposDep

router = APIRouter()


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Category (admin)",
    responses={400: {"description": "Missing or duplicate name"}},
)
async def create_category(payload: CategoryWrite, _: AdminUserDep, repos: ReposDep) -> CategoryRead:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    if await repos.categories.get_by_name(name):
        raise HTTPException(status_code=400, detail="Already exists")

    category = await repos.categories.create(Category(name=name))
    return CategoryRead.model_validate(category)


@router.get("/categories", response_model=List[CategoryRead], summary="List Categories")
async def list_categories(repos: ReposDep) -> List[CategoryRead]:
    return [CategoryRead.model_validate(c) for c in await repos.categories.list()]


@router.put(
    "/{category_id}",
    response_model=CategoryRead,
    summary="Update Category (admin)",
    responses={404: {"description": "Category not found"}},
)
async def update_category(
    category_id: int, payload: CategoryWrite, _: AdminUserDep, repos: ReposDep
) -> CategoryRead:
    category = await repos.categories.get_by_id(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")

    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    existing = await repos.categories.get_by_name(name)
    if existing is not None and existing.id != category.id:
        raise HTTPException(status_code=400, detail="Already exists")

    category.name = name
    category = await repos.categories.update(category)
    return CategoryRead.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=CategoryRead,
    summary="Remove Category (admin)",
    responses={404: {"description": "Category not found"}},
)
async def remove_category(category_id: int, _: AdminUserDep, repos: ReposDep) -> CategoryRead:
    category = await repos.categories.get_by_id(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    if await repos.products.count(filters={"category_id": category_id}):
        raise HTTPException(status_code=400, detail="Category is still used by products")

    removed = CategoryRead.model_validate(category)
    await repos.categories.delete(category_id)
    return removed


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    summary="Read Category",
    responses={404: {"description": "Category not found"}},
)
async def read_category(category_id: int, repos: ReposDep) -> CategoryRead:
    category = await repos.categories.get_by_id(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryRead.model_validate(category)
