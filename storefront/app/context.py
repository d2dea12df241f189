"""Per-request wiring of the visitor's stores.

Each request gets its own store objects, loaded from the visitor's rows and
closed in teardown. Views receive them from these accessors instead of
reaching for module-level state.
"""

from __future__ import annotations

import uuid

from flask import current_app, g, session

from storefront.app.extensions import db
from storefront.catalog.cache import ProductCatalog
from storefront.catalog.client import ApiClient
from storefront.state.cart import CartStore
from storefront.state.customer import CustomerSessionStore
from storefront.state.recently_viewed import RecentlyViewedStore
from storefront.state.storage import DatabaseStorage
from storefront.views.carousel import Carousel, CarouselRegistry, visible_banners

VISITOR_KEY = "visitor_id"


def visitor_id() -> str:
    vid = session.get(VISITOR_KEY)
    if not vid:
        vid = uuid.uuid4().hex
        session[VISITOR_KEY] = vid
        session.permanent = True
    return vid


def api_client() -> ApiClient:
    return current_app.extensions["storefront.api"]


def catalog() -> ProductCatalog:
    return current_app.extensions["storefront.catalog"]


def carousels() -> CarouselRegistry:
    return current_app.extensions["storefront.carousels"]


def visitor_carousel(refresh: bool = False) -> Carousel:
    """The visitor's live hero carousel.

    Banners are fetched when the visitor has no carousel yet, or on `refresh`.
    A failed fetch raises `NetworkError` and leaves any live carousel alone.
    """
    registry = carousels()
    owner = visitor_id()
    live = registry.get(owner)
    if live is not None and not refresh:
        return live
    banners = visible_banners(api_client().list_banners())
    return registry.sync(owner, banners)


def _storage() -> DatabaseStorage:
    if "storage" not in g:
        g.storage = DatabaseStorage(db.session, visitor_id())
    return g.storage


def _stores() -> dict:
    if "stores" not in g:
        g.stores = {}
    return g.stores


def cart_store() -> CartStore:
    stores = _stores()
    if "cart" not in stores:
        stores["cart"] = CartStore(_storage()).load()
    return stores["cart"]


def customer_store() -> CustomerSessionStore:
    stores = _stores()
    if "customer" not in stores:
        stores["customer"] = CustomerSessionStore(_storage(), api=api_client()).load()
    return stores["customer"]


def recently_viewed_store() -> RecentlyViewedStore:
    stores = _stores()
    if "recently_viewed" not in stores:
        limit = current_app.config["RECENTLY_VIEWED_LIMIT"]
        stores["recently_viewed"] = RecentlyViewedStore(_storage(), limit=limit).load()
    return stores["recently_viewed"]


def close_stores(exc=None) -> None:
    for store in g.pop("stores", {}).values():
        store.close()
    g.pop("storage", None)
