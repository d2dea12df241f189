from __future__ import annotations

from flask import Blueprint, current_app, request

from storefront.app.context import api_client, catalog, recently_viewed_store, visitor_carousel
from storefront.app.common.errors import abort_json
from storefront.app.common.validation import get_json, int_field, require_fields
from storefront.catalog import selectors
from storefront.views.carousel import visible_banners

bp = Blueprint("catalog", __name__)


def _product_or_404(slug: str):
    product = selectors.find_by_slug(catalog().ensure_loaded(), slug)
    if product is None:
        abort_json(404, "not_found", "Product not found")
    return product


@bp.get("/products")
def list_products():
    """GET /api/products - Cached product list.

    Query params:
      - search: free text over name and descriptions
      - category: category id
      - page, limit
    """
    page = request.args.get("page", 1, type=int)
    limit = min(request.args.get("limit", 20, type=int), 100)
    search = request.args.get("search", "")
    category = request.args.get("category")

    products = selectors.search(catalog().ensure_loaded(), search)
    if category:
        products = selectors.by_category(products, category)

    return selectors.paginate(products, page, limit).to_dict(lambda p: p.to_dict()), 200


@bp.get("/products/featured")
def featured_products():
    return {"items": [p.to_dict() for p in selectors.featured(catalog().ensure_loaded())]}, 200


@bp.get("/products/filters")
def product_filters():
    return selectors.filter_options(catalog().ensure_loaded()), 200


@bp.post("/products/refresh")
def refresh_products():
    """POST /api/products/refresh - Re-fetch the catalog from the store API."""
    products = catalog().refresh()
    return {"count": len(products)}, 200


@bp.get("/products/<slug>")
def get_product(slug: str):
    """GET /api/products/<slug> - One product; also recorded as recently viewed."""
    product = _product_or_404(slug)
    recently_viewed_store().record_view(product)
    return product.to_dict(), 200


@bp.get("/products/<slug>/similar")
def similar_products(slug: str):
    product = _product_or_404(slug)
    items = selectors.similar(catalog().products, product)
    return {"items": [p.to_dict() for p in items]}, 200


@bp.get("/categories")
def list_categories():
    """GET /api/categories - Active categories; `?root=1` keeps top-level ones only."""
    categories = api_client().list_categories()
    if request.args.get("root") in ("1", "true"):
        categories = selectors.root_categories(categories)
    return {"items": [c.to_dict() for c in categories]}, 200


@bp.get("/brands")
def list_brands():
    return {"items": [b.to_dict() for b in api_client().list_brands()]}, 200


@bp.get("/brands/<slug>")
def brand_products(slug: str):
    """GET /api/brands/<slug> - The brand and a page of its products."""
    brand = selectors.find_named(api_client().list_brands(), slug)
    if brand is None:
        abort_json(404, "not_found", "Brand not found")

    page = request.args.get("page", 1, type=int)
    limit = min(request.args.get("limit", 20, type=int), 100)
    products = selectors.by_brand(catalog().ensure_loaded(), brand)
    return {
        "brand": brand.to_dict(),
        "products": selectors.paginate(products, page, limit).to_dict(lambda p: p.to_dict()),
    }, 200


@bp.get("/recently-viewed")
def recently_viewed():
    return {"items": [e.to_dict() for e in recently_viewed_store().entries]}, 200


@bp.delete("/recently-viewed")
def clear_recently_viewed():
    recently_viewed_store().clear_all()
    return {"items": []}, 200


@bp.get("/banners")
def banners():
    """GET /api/banners - Hero banners plus the slideshow timings."""
    items = visible_banners(api_client().list_banners())
    return {
        "items": [b.to_dict() for b in items],
        "interval": current_app.config["CAROUSEL_INTERVAL"],
        "resume_delay": current_app.config["CAROUSEL_RESUME_DELAY"],
    }, 200


@bp.get("/banners/carousel")
def carousel_state():
    """GET /api/banners/carousel - The visitor's live slideshow state."""
    return visitor_carousel().to_dict(), 200


@bp.post("/banners/carousel/next")
def carousel_next():
    carousel = visitor_carousel()
    carousel.next()
    return carousel.to_dict(), 200


@bp.post("/banners/carousel/prev")
def carousel_prev():
    carousel = visitor_carousel()
    carousel.prev()
    return carousel.to_dict(), 200


@bp.post("/banners/carousel/go")
def carousel_go():
    """POST /api/banners/carousel/go - Jump to {"index": n}; pauses auto-play."""
    data = get_json()
    require_fields(data, ["index"])
    carousel = visitor_carousel()
    carousel.go_to(int_field(data, "index"))
    return carousel.to_dict(), 200
