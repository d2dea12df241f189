# run with: pytest tests/test_catalog.py -v

import threading
import time

import pytest

from conftest import BANNERS, BRANDS, CATEGORIES, KHAADI_ID, PRODUCTS
from storefront.catalog import selectors
from storefront.catalog.cache import ProductCatalog
from storefront.catalog.normalize import (
    PLACEHOLDER_IMAGE,
    normalize_banner,
    normalize_brand,
    normalize_category,
    normalize_product,
)
from storefront.catalog.shipping import quote_shipping
from storefront.errors import NetworkError, ParseError

CATALOG = [normalize_product(p) for p in PRODUCTS]


def product_ids(products):
    return [p.id for p in products]


# CATALOG-001: normalisation
def test_normalize_product_flattens_payload():
    p1, p2, p3, p4 = CATALOG

    assert p1.id == "p1"
    assert p1.images == ("/img/p1.jpg",)
    assert p1.available_sizes == ("S", "M")
    assert p2.images == ("/img/p2.jpg",)
    assert p3.images == (PLACEHOLDER_IMAGE,)
    assert p3.is_new is True
    assert p4.category == "c-shirts"


def test_normalize_product_drops_object_id_references():
    raw = {
        "_id": "p9",
        "name": "Kurta",
        "price": "1200",
        "brand": "64b7f0c2a1e4d3b2c1a09f88",
        "colors": ["64b7f0c2a1e4d3b2c1a09f88", {"name": "Green"}, "Blue"],
        "images": [{"url": "/img/k.jpg"}, "64b7f0c2a1e4d3b2c1a09f88"],
        "isSale": "true",
    }
    product = normalize_product(raw)

    assert product.price == 1200.0
    assert product.brand is None
    assert product.colors == ("Green", "Blue")
    assert product.images == ("/img/k.jpg",)
    assert product.is_sale is False


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "x", "price": 1},
        {"_id": "p", "price": 1},
        {"_id": "p", "name": "x"},
        {"_id": "p", "name": "x", "price": "NaN"},
        {"_id": "p", "name": "x", "price": float("inf")},
        [],
    ],
)
def test_normalize_product_rejects_incomplete_payloads(raw):
    with pytest.raises(ParseError):
        normalize_product(raw)


def test_normalize_banner_defaults():
    b1, b2, b3 = (normalize_banner(b) for b in BANNERS)

    assert b1.title == "Summer Sale"
    assert b1.link_url == "/shop?sale=1"
    assert b1.link_text == "Shop Now"
    assert b2.title == "New arrivals"
    assert b3.position == "footer"


# CATALOG-002: selectors
def test_featured_matches_rating_reviews_or_new():
    assert product_ids(selectors.featured(CATALOG)) == ["p1", "p2", "p3"]
    assert product_ids(selectors.featured(CATALOG, limit=2)) == ["p1", "p2"]


def test_similar_shares_category_and_excludes_self():
    p1 = CATALOG[0]
    assert product_ids(selectors.similar(CATALOG, p1)) == ["p2", "p4"]
    assert selectors.similar(CATALOG, CATALOG[2]) == []


def test_selectors_do_not_mutate_input():
    before = list(CATALOG)
    selectors.featured(CATALOG)
    selectors.similar(CATALOG, CATALOG[0])
    selectors.search(CATALOG, "shirt")
    assert CATALOG == before


def test_search_and_category_filter():
    assert product_ids(selectors.search(CATALOG, "SHIRT")) == ["p1", "p2", "p4"]
    assert product_ids(selectors.search(CATALOG, "soft")) == ["p3"]
    assert len(selectors.search(CATALOG, "  ")) == 4
    assert product_ids(selectors.by_category(CATALOG, "c-dupatta")) == ["p3"]


def test_find_by_slug_falls_back_to_id():
    assert selectors.find_by_slug(CATALOG, "silk-shirt").id == "p2"
    assert selectors.find_by_slug(CATALOG, "p3").id == "p3"
    assert selectors.find_by_slug(CATALOG, "missing") is None


def test_paginate():
    page = selectors.paginate(CATALOG, page=2, limit=3)
    assert product_ids(page.data) == ["p4"]
    assert page.total == 4
    assert page.total_pages == 2
    assert page.has_prev and not page.has_next

    assert selectors.paginate([], page=1, limit=10).total_pages == 1


def test_filter_options():
    options = selectors.filter_options(CATALOG)
    assert options["sizes"] == ["S", "M"]
    assert options["colors"] == ["Red"]
    assert options["price_range"] == {"min": 800, "max": 2500}


# CATALOG-004: categories and brands
def test_normalize_category_and_brand():
    shirts, _, silk = (normalize_category(c) for c in CATEGORIES)
    assert shirts.is_root
    assert silk.parent_id == "c-shirts"
    assert not silk.is_root

    khaadi = normalize_brand(BRANDS[0])
    assert (khaadi.id, khaadi.slug, khaadi.country) == (KHAADI_ID, "khaadi", "PK")
    assert normalize_brand({"_id": "b9", "name": "Plain"}).slug == "b9"

    with pytest.raises(ParseError):
        normalize_brand(BRANDS[2])


def test_product_keeps_brand_reference():
    p1, p2, p3, p4 = CATALOG
    assert (p1.brand, p1.brand_id) == (None, KHAADI_ID)
    assert (p2.brand, p2.brand_id) == ("Khaadi", KHAADI_ID)
    assert (p3.brand, p3.brand_id) == ("Sapphire", "Sapphire")
    assert p4.brand_id is None


def test_by_brand_matches_id_or_inlined_name():
    khaadi, sapphire = normalize_brand(BRANDS[0]), normalize_brand(BRANDS[1])
    assert product_ids(selectors.by_brand(CATALOG, khaadi)) == ["p1", "p2"]
    assert product_ids(selectors.by_brand(CATALOG, sapphire)) == ["p3"]


def test_find_named_and_root_categories():
    categories = [normalize_category(c) for c in CATEGORIES]
    assert selectors.find_named(categories, "dupatta").id == "c-dupatta"
    assert selectors.find_named(categories, "Silk Shirts").id == "c-silk"
    assert selectors.find_named(categories, "missing") is None
    assert [c.id for c in selectors.root_categories(categories)] == ["c-shirts", "c-dupatta"]


@pytest.mark.parametrize("total, cost", [(0, 500), (9999, 500), (10000, 0), (25000, 0)])
def test_quote_shipping(total, cost):
    quote = quote_shipping(total)
    assert quote["total_cost"] == cost
    assert quote["methods"][0]["cost"] == cost
    assert quote["currency"] == "PKR"


# CATALOG-003: the shared cache
def test_refresh_loads_and_ensure_loaded_reuses():
    calls = []

    def fetch():
        calls.append(1)
        return CATALOG

    catalog = ProductCatalog(fetch)
    assert not catalog.loaded
    assert catalog.ensure_loaded() == tuple(CATALOG)
    assert catalog.ensure_loaded() == tuple(CATALOG)
    assert catalog.loaded
    assert len(calls) == 1


def test_concurrent_refreshes_share_one_fetch():
    started = threading.Event()
    release = threading.Event()
    calls = []

    def fetch():
        calls.append(1)
        started.set()
        release.wait(5)
        return CATALOG

    catalog = ProductCatalog(fetch)
    results = []

    def worker():
        results.append(catalog.refresh())

    first = threading.Thread(target=worker)
    first.start()
    assert started.wait(5)
    assert catalog.loading

    others = [threading.Thread(target=worker) for _ in range(4)]
    for t in others:
        t.start()
    time.sleep(0.2)  # let the waiters reach the pending future
    release.set()
    for t in [first] + others:
        t.join(5)

    assert len(calls) == 1
    assert len(results) == 5
    assert all(r == tuple(CATALOG) for r in results)
    assert not catalog.loading


def test_failed_refresh_propagates_to_all_waiters_and_keeps_cache():
    outcomes = iter([CATALOG, "fail"])
    started = threading.Event()
    release = threading.Event()

    def fetch():
        outcome = next(outcomes)
        if outcome == "fail":
            started.set()
            release.wait(5)
            raise NetworkError("API down", status_code=503)
        return outcome

    catalog = ProductCatalog(fetch)
    catalog.refresh()

    errors = []

    def worker():
        try:
            catalog.refresh()
        except NetworkError as exc:
            errors.append(exc)

    first = threading.Thread(target=worker)
    first.start()
    assert started.wait(5)
    second = threading.Thread(target=worker)
    second.start()
    time.sleep(0.2)
    release.set()
    first.join(5)
    second.join(5)

    assert len(errors) == 2
    assert all(e.status_code == 503 for e in errors)
    assert catalog.products == tuple(CATALOG)
    assert not catalog.loading


def test_refresh_after_failure_starts_a_new_fetch():
    attempts = []

    def fetch():
        attempts.append(1)
        if len(attempts) == 1:
            raise NetworkError("offline")
        return CATALOG[:2]

    catalog = ProductCatalog(fetch)
    with pytest.raises(NetworkError):
        catalog.refresh()
    assert catalog.products == ()

    assert product_ids(catalog.refresh()) == ["p1", "p2"]
