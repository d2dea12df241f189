"""Turn raw API payloads into Product, Banner, Category and Brand records.

The products endpoint is loose about shapes: images may be strings or
objects, brands may be bare ObjectIds, sizes and colors may be references.
Everything is flattened here so templates and selectors see one shape.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from storefront.errors import ParseError

PLACEHOLDER_IMAGE = "/static/images/placeholder.svg"

_OBJECT_ID = re.compile(r"^[a-f\d]{24}$", re.IGNORECASE)


def looks_like_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID.match(value.strip()))


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    slug: Optional[str] = None
    category: str = ""
    categories: Tuple[str, ...] = ()
    brand: Optional[str] = None
    brand_id: Optional[str] = None
    images: Tuple[str, ...] = (PLACEHOLDER_IMAGE,)
    description: Optional[str] = None
    short_description: Optional[str] = None
    rating: Optional[float] = None
    reviews: Optional[int] = None
    is_new: bool = False
    is_sale: bool = False
    original_price: Optional[float] = None
    sale_price: Optional[float] = None
    available_sizes: Tuple[str, ...] = ()
    colors: Tuple[str, ...] = ()
    in_stock: Optional[bool] = None
    created_at: Optional[str] = None

    @property
    def image(self) -> str:
        return self.images[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "price": self.price,
            "category": self.category,
            "categories": list(self.categories),
            "brand": self.brand,
            "brand_id": self.brand_id,
            "images": list(self.images),
            "description": self.description,
            "short_description": self.short_description,
            "rating": self.rating,
            "reviews": self.reviews,
            "is_new": self.is_new,
            "is_sale": self.is_sale,
            "original_price": self.original_price,
            "sale_price": self.sale_price,
            "available_sizes": list(self.available_sizes),
            "colors": list(self.colors),
            "in_stock": self.in_stock,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class Banner:
    id: str
    title: str
    image_url: str
    link_url: str = "/shop"
    link_text: str = "Shop Now"
    subtitle: Optional[str] = None
    description: Optional[str] = None
    alt_text: Optional[str] = None
    position: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "image_url": self.image_url,
            "alt_text": self.alt_text,
            "link_url": self.link_url,
            "link_text": self.link_text,
            "position": self.position,
        }


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    parent_id: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return not self.parent_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "image_url": self.image_url,
            "parent_id": self.parent_id,
        }


@dataclass(frozen=True)
class Brand:
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    country: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "logo_url": self.logo_url,
            "website": self.website,
            "country": self.country,
        }


def _image_url(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        if value and not looks_like_object_id(value):
            return value
        return None
    if isinstance(value, dict):
        candidate = value.get("url") or value.get("imageUrl") or value.get("path") or ""
        candidate = str(candidate).strip()
        return candidate or None
    return None


def _image_list(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [url for url in (_image_url(v) for v in values) if url]


def _images(raw: Dict[str, Any]) -> Tuple[str, ...]:
    images = _image_list(raw.get("images"))
    if not images:
        featured = _image_url(raw.get("featuredImage"))
        if featured:
            images = [featured]
    if not images:
        images = _image_list(raw.get("gallery"))
    return tuple(images) or (PLACEHOLDER_IMAGE,)


def _brand(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return None if looks_like_object_id(value) else value
    if isinstance(value, dict):
        return value.get("name") or value.get("slug") or None
    return None


def _ref_id(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("_id") or "")
    return str(value or "")


def _sizes(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, list):
        return ()
    sizes = []
    for s in values:
        if isinstance(s, dict):
            s = s.get("name") or s.get("size") or s.get("label")
        if s:
            sizes.append(str(s))
    return tuple(sizes)


def _colors(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, list):
        return ()
    colors = []
    for c in values:
        if isinstance(c, str):
            if c.strip() and not looks_like_object_id(c):
                colors.append(c.strip())
        elif isinstance(c, dict):
            name = c.get("name") or c.get("colorName") or c.get("label") or c.get("title")
            if not name and isinstance(c.get("colorId"), str) and not looks_like_object_id(c["colorId"]):
                name = c["colorId"]
            if name:
                colors.append(str(name))
    return tuple(colors)


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_product(raw: Any) -> Product:
    if not isinstance(raw, dict):
        raise ParseError("Product payload is not an object")
    product_id = raw.get("_id") or raw.get("id")
    name = raw.get("name")
    price = _number(raw.get("price"))
    if not product_id or not name or price is None:
        raise ParseError("Product payload is missing id, name or price", {"id": product_id})

    reviews = raw.get("reviews")
    return Product(
        id=str(product_id),
        name=str(name),
        price=price,
        slug=raw.get("slug"),
        category=_ref_id(raw.get("category")),
        categories=tuple(_ref_id(c) for c in raw.get("categories") or [] if _ref_id(c)),
        brand=_brand(raw.get("brand")),
        brand_id=_ref_id(raw.get("brand")) or None,
        images=_images(raw),
        description=raw.get("description"),
        short_description=raw.get("shortDescription"),
        rating=_number(raw.get("rating")),
        reviews=int(reviews) if isinstance(reviews, (int, float)) and not isinstance(reviews, bool) else None,
        is_new=raw.get("isNew") is True,
        is_sale=raw.get("isSale") is True,
        original_price=_number(raw.get("originalPrice")),
        sale_price=_number(raw.get("salePrice")),
        available_sizes=_sizes(raw.get("availableSizes")),
        colors=_colors(raw.get("colors")),
        in_stock=raw.get("inStock"),
        created_at=raw.get("createdAt"),
    )


def normalize_banner(raw: Any) -> Banner:
    if not isinstance(raw, dict):
        raise ParseError("Banner payload is not an object")
    banner_id = raw.get("_id") or raw.get("id")
    image = raw.get("image") or raw.get("imageUrl")
    if not banner_id or not image:
        raise ParseError("Banner payload is missing id or image", {"id": banner_id})

    title = raw.get("title") or raw.get("subtitle") or "Hero banner"
    return Banner(
        id=str(banner_id),
        title=title,
        image_url=image,
        link_url=raw.get("buttonLink") or "/shop",
        link_text=raw.get("buttonText") or "Shop Now",
        subtitle=raw.get("subtitle"),
        description=raw.get("description"),
        alt_text=title,
        position=raw.get("position"),
    )


def _named_record(raw: Any, kind: str) -> Tuple[str, str, str]:
    if not isinstance(raw, dict):
        raise ParseError(f"{kind} payload is not an object")
    record_id = raw.get("_id") or raw.get("id")
    name = raw.get("name")
    if not record_id or not name:
        raise ParseError(f"{kind} payload is missing id or name", {"id": record_id})
    return str(record_id), str(name), str(raw.get("slug") or record_id)


def normalize_category(raw: Any) -> Category:
    category_id, name, slug = _named_record(raw, "Category")
    parent = raw.get("parentId") or raw.get("parent")
    return Category(
        id=category_id,
        name=name,
        slug=slug,
        description=raw.get("description"),
        image_url=_image_url(raw.get("image")),
        parent_id=_ref_id(parent) or None,
    )


def normalize_brand(raw: Any) -> Brand:
    brand_id, name, slug = _named_record(raw, "Brand")
    return Brand(
        id=brand_id,
        name=name,
        slug=slug,
        description=raw.get("description"),
        logo_url=_image_url(raw.get("logo")),
        website=raw.get("website"),
        country=raw.get("country"),
    )
