"""
Catalog read-model helpers.

Builds product read models that need more than one table: products with
their reviews, and products with their category embedded.
"""

from __future__ import annotations

from typing import List, Sequence

from storefront.core.database.entities.products import Product
from storefront.core.database.repositories import SqlRepoBundle
from storefront.core.models.io.categories import CategoryRead
from storefront.core.models.io.products import (
    ProductDetail,
    ProductRead,
    ProductWithCategory,
    ReviewRead,
)


async def product_detail(repos: SqlRepoBundle, product: Product) -> ProductDetail:
    reviews = await repos.products.get_reviews(product.id)  # type: ignore[arg-type]
    return ProductDetail.model_validate(
        {
            **ProductRead.model_validate(product).model_dump(),
            "reviews": [ReviewRead.model_validate(r) for r in reviews],
        }
    )


async def products_with_category(repos: SqlRepoBundle, products: Sequence[Product]) -> List[ProductWithCategory]:
    categories = {c.id: c for c in await repos.categories.get_many(p.category_id for p in products)}
    reads = []
    for product in products:
        category = categories.get(product.category_id)
        reads.append(
            ProductWithCategory.model_validate(
                {
                    **ProductRead.model_validate(product).model_dump(exclude={"category"}),
                    "category": CategoryRead.model_validate(category) if category is not None else None,
                }
            )
        )
    return reads
