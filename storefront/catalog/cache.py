"""Process-wide product list shared by every view.

Request threads read `products` freely. `refresh()` collapses concurrent
callers onto one in-flight fetch: the first caller runs it, later callers wait
on the same future and receive the same result or the same error.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Iterable, Optional, Tuple

from storefront.catalog.normalize import Product

logger = logging.getLogger(__name__)


class ProductCatalog:
    def __init__(self, fetch: Callable[[], Iterable[Product]]):
        self._fetch = fetch
        self._lock = threading.Lock()
        self._products: Tuple[Product, ...] = ()
        self._pending: Optional[Future] = None
        self._loaded = False

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> Tuple[Product, ...]:
        if self._loaded:
            return self._products
        return self.refresh()

    def refresh(self) -> Tuple[Product, ...]:
        with self._lock:
            pending = self._pending
            owner = pending is None
            if owner:
                pending = self._pending = Future()

        if not owner:
            return pending.result()

        try:
            products = tuple(self._fetch())
        except Exception as exc:
            with self._lock:
                self._pending = None
            logger.warning("Catalog refresh failed, keeping %d cached products", len(self._products))
            pending.set_exception(exc)
            raise

        with self._lock:
            self._products = products
            self._loaded = True
            self._pending = None
        logger.info("Catalog refreshed with %d products", len(products))
        pending.set_result(products)
        return products
