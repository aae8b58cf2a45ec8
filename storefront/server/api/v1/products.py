"""
Product Endpoints.

This module serves the catalog: paginated keyword search, storefront
listings (all, top rated, newest), category/price filtering, product
reviews, and admin create/update/delete. Create and update take multipart
form fields, matching the admin product form.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Form, HTTPException, Query, status

from storefront.core.database.entities.products import Product, Review
from storefront.core.logging_config import get_logger
from storefront.core.models.io.base import MessageResponse
from storefront.core.models.io.products import (
    ProductDetail,
    ProductFilter,
    ProductPage,
    ProductRead,
    ProductWithCategory,
    ReviewCreate,
)
from storefront.server.services.catalog import product_detail, products_with_category
from storefront.server.services.deps import AdminUserDep, CurrentUserDep, ReposDep
from storefront.core.database.repositories import SqlRepoBundle

logger = get_logger(__name__)

router = APIRouter()

PAGE_SIZE = 6
ALL_PRODUCTS_LIMIT = 12
TOP_PRODUCTS_LIMIT = 4
NEW_PRODUCTS_LIMIT = 5

OptionalForm = Annotated[Optional[str], Form()]


def _parse_number(value: str, label: str, cast):
    try:
        number = cast(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{label} must be a number")
    if number < 0:
        raise HTTPException(status_code=400, detail=f"{label} must not be negative")
    return number


async def _validate_product_form(
    repos: SqlRepoBundle,
    *,
    name: Optional[str],
    brand: Optional[str],
    description: Optional[str],
    price: Optional[str],
    category: Optional[str],
    quantity: Optional[str],
    count_in_stock: Optional[str],
    image: Optional[str],
) -> Dict[str, Any]:
    """Check the product form in field order and return entity values.

    Raises:
        HTTPException: 400 naming the first missing or invalid field
    """
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    if not brand:
        raise HTTPException(status_code=400, detail="Brand is required")
    if not description:
        raise HTTPException(status_code=400, detail="Description is required")
    if not price:
        raise HTTPException(status_code=400, detail="Price is required")
    if not category:
        raise HTTPException(status_code=400, detail="Category is required")
    try:
        category_id = int(category)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid category ID")
    if await repos.categories.get_by_id(category_id) is None:
        raise HTTPException(status_code=400, detail="Invalid category ID")
    if not quantity:
        raise HTTPException(status_code=400, detail="Quantity is required")

    values: Dict[str, Any] = {
        "name": name,
        "brand": brand,
        "description": description,
        "price": _parse_number(price, "Price", float),
        "category_id": category_id,
        "quantity": _parse_number(quantity, "Quantity", int),
    }
    if count_in_stock:
        values["count_in_stock"] = _parse_number(count_in_stock, "Count in stock", int)
    if image is not None:
        values["image"] = image
    return values


@router.get("", response_model=ProductPage, summary="Search Products")
async def fetch_products(
    repos: ReposDep,
    keyword: Optional[str] = None,
    page_number: Annotated[int, Query(alias="pageNumber", ge=1)] = 1,
) -> ProductPage:
    """
    Search products by name.

    Returns one page of ``PAGE_SIZE`` products whose name contains
    ``keyword`` (case-insensitive), the page number, the page count and
    whether more pages follow.
    """
    products, total = await repos.products.search(
        keyword=keyword, limit=PAGE_SIZE, offset=PAGE_SIZE * (page_number - 1)
    )
    pages = math.ceil(total / PAGE_SIZE)
    return ProductPage(
        products=[ProductRead.model_validate(p) for p in products],
        page=page_number,
        pages=pages,
        has_more=page_number < pages,
    )


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Product (admin)",
    responses={400: {"description": "Missing or invalid form field"}},
)
async def add_product(
    _: AdminUserDep,
    repos: ReposDep,
    name: OptionalForm = None,
    brand: OptionalForm = None,
    description: OptionalForm = None,
    price: OptionalForm = None,
    category: OptionalForm = None,
    quantity: OptionalForm = None,
    count_in_stock: Annotated[Optional[str], Form(alias="countInStock")] = None,
    image: OptionalForm = None,
) -> ProductRead:
    values = await _validate_product_form(
        repos,
        name=name,
        brand=brand,
        description=description,
        price=price,
        category=category,
        quantity=quantity,
        count_in_stock=count_in_stock,
        image=image,
    )
    product = await repos.products.create(Product(**values))
    logger.info(f"Added product {product.id}: {product.name}")
    return ProductRead.model_validate(product)


@router.get("/allproducts", response_model=List[ProductWithCategory], summary="Latest Products")
async def fetch_all_products(repos: ReposDep) -> List[ProductWithCategory]:
    """The newest products with their category embedded."""
    return await products_with_category(repos, await repos.products.latest(ALL_PRODUCTS_LIMIT))


@router.get("/top", response_model=List[ProductRead], summary="Top Rated Products")
async def fetch_top_products(repos: ReposDep) -> List[ProductRead]:
    return [ProductRead.model_validate(p) for p in await repos.products.top_rated(TOP_PRODUCTS_LIMIT)]


@router.get("/new", response_model=List[ProductRead], summary="New Products")
async def fetch_new_products(repos: ReposDep) -> List[ProductRead]:
    return [ProductRead.model_validate(p) for p in await repos.products.newest(NEW_PRODUCTS_LIMIT)]


@router.post("/filtered-products", response_model=List[ProductRead], summary="Filter Products")
async def filter_products(payload: ProductFilter, repos: ReposDep) -> List[ProductRead]:
    """
    Filter by checked categories and a ``[min, max]`` price range.

    An empty ``checked`` list or ``radio`` range disables that filter.
    """
    products = await repos.products.filter(category_ids=payload.checked, price_range=payload.radio)
    return [ProductRead.model_validate(p) for p in products]


@router.post(
    "/{product_id}/reviews",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Review",
    responses={400: {"description": "Already reviewed"}, 404: {"description": "Product not found"}},
)
async def add_product_review(
    product_id: int, payload: ReviewCreate, user: CurrentUserDep, repos: ReposDep
) -> MessageResponse:
    """
    Review a product.

    Each user may review a product once. The product's review count and mean
    rating are recomputed.
    """
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if await repos.products.get_review_by_user(product_id, user.id):  # type: ignore[arg-type]
        raise HTTPException(status_code=400, detail="Product already reviewed")

    review = Review(
        product_id=product_id,
        user_id=user.id,  # type: ignore[arg-type]
        name=user.username,
        rating=payload.rating,
        comment=payload.comment,
    )
    await repos.products.add_review(product, review)
    return MessageResponse(message="Review added")


@router.get(
    "/{product_id}",
    response_model=ProductDetail,
    summary="Get Product",
    responses={404: {"description": "Product not found"}},
)
async def fetch_product_by_id(product_id: int, repos: ReposDep) -> ProductDetail:
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return await product_detail(repos, product)


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    summary="Update Product (admin)",
    responses={400: {"description": "Missing or invalid form field"}, 404: {"description": "Product not found"}},
)
async def update_product_details(
    product_id: int,
    _: AdminUserDep,
    repos: ReposDep,
    name: OptionalForm = None,
    brand: OptionalForm = None,
    description: OptionalForm = None,
    price: OptionalForm = None,
    category: OptionalForm = None,
    quantity: OptionalForm = None,
    count_in_stock: Annotated[Optional[str], Form(alias="countInStock")] = None,
    image: OptionalForm = None,
) -> ProductRead:
    values = await _validate_product_form(
        repos,
        name=name,
        brand=brand,
        description=description,
        price=price,
        category=category,
        quantity=quantity,
        count_in_stock=count_in_stock,
        image=image,
    )
    product = await repos.products.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    for key, value in values.items():
        setattr(product, key, value)
    product = await repos.products.update(product)
    return ProductRead.model_validate(product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Remove Product (admin)",
    responses={404: {"description": "Product not found"}},
)
async def remove_product(product_id: int, _: AdminUserDep, repos: ReposDep) -> MessageResponse:
    if not await repos.products.delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Removed product {product_id}")
    return MessageResponse(message="Product deleted successfully")
