"""Pure views over the cached product list. Nothing here mutates its input."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from storefront.catalog.normalize import Brand, Category, Product

FEATURED_LIMIT = 6
SIMILAR_LIMIT = 4


@dataclass(frozen=True)
class Page:
    data: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.limit))

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self, item=lambda x: x) -> Dict[str, Any]:
        return {
            "data": [item(x) for x in self.data],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def is_featured(product: Product) -> bool:
    return (
        (product.rating or 0) >= 4.5
        or (product.reviews or 0) >= 10
        or product.is_new
    )


def featured(products: Sequence[Product], limit: int = FEATURED_LIMIT) -> List[Product]:
    return [p for p in products if is_featured(p)][:limit]


def similar(products: Sequence[Product], product: Product, limit: int = SIMILAR_LIMIT) -> List[Product]:
    return [p for p in products if p.category == product.category and p.id != product.id][:limit]


def search(products: Sequence[Product], query: str) -> List[Product]:
    q = (query or "").strip().lower()
    if not q:
        return list(products)
    return [
        p
        for p in products
        if q in p.name.lower()
        or (p.description and q in p.description.lower())
        or (p.short_description and q in p.short_description.lower())
    ]


def by_category(products: Sequence[Product], category_id: str) -> List[Product]:
    return [p for p in products if p.category == category_id or category_id in p.categories]


def by_brand(products: Sequence[Product], brand: Brand) -> List[Product]:
    """Products whose brand reference is the brand's id, or its name when the API inlines names."""
    return [
        p
        for p in products
        if p.brand_id == brand.id or (p.brand is not None and p.brand in (brand.name, brand.slug))
    ]


def find_named(records: Sequence[Any], slug: str) -> Optional[Any]:
    """Category or brand by slug, falling back to its name."""
    for r in records:
        if r.slug == slug:
            return r
    for r in records:
        if r.name == slug:
            return r
    return None


def root_categories(categories: Sequence[Category]) -> List[Category]:
    return [c for c in categories if c.is_root]


def find_by_slug(products: Sequence[Product], slug: str) -> Optional[Product]:
    """Slug match first, then the id for links that predate slugs."""
    for p in products:
        if p.slug == slug:
            return p
    for p in products:
        if p.id == slug:
            return p
    return None


def paginate(items: Sequence[Any], page: int = 1, limit: int = 100) -> Page:
    page = max(1, page)
    limit = max(1, limit)
    start = (page - 1) * limit
    return Page(data=list(items[start:start + limit]), total=len(items), page=page, limit=limit)


def filter_options(products: Sequence[Product]) -> Dict[str, Any]:
    sizes: List[str] = []
    colors: List[str] = []
    for p in products:
        for s in p.available_sizes:
            if s not in sizes:
                sizes.append(s)
        for c in p.colors:
            if c not in colors:
                colors.append(c)

    prices = [p.price for p in products]
    return {
        "sizes": sizes,
        "colors": colors,
        "price_range": {"min": min(prices) if prices else 0, "max": max(prices) if prices else 0},
    }
