"""Cart drawer view: JSON summary of the cart and the rendered drawer fragment."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import render_template

from storefront.state.cart import CartState, CartStore


def cart_summary(state: CartState) -> Dict[str, Any]:
    return {
        "is_open": state.is_open,
        "items": [
            dict(line.to_dict(), line_total=line.line_total)
            for line in state.lines
        ],
        "item_count": state.item_count,
        "total": state.total,
    }


class CartDrawer:
    """Slide-out cart panel bound to one CartStore for one request.

    Keeps a rendered-ready summary up to date through the store subscription and
    forwards user commands to the store. Call `teardown()` when done.
    """

    def __init__(self, store: CartStore):
        self._store = store
        self.summary = cart_summary(store.snapshot)
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, state: CartState) -> None:
        self.summary = cart_summary(state)

    def teardown(self) -> None:
        self._unsubscribe()

    # --- commands ---
    def open(self) -> None:
        self._store.open_cart()

    def close(self) -> None:
        self._store.close_cart()

    def increment(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> None:
        line = self._store.snapshot.find((str(product_id), size, color))
        if line:
            self._store.update_quantity(product_id, line.quantity + 1, size, color)

    def decrement(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> None:
        line = self._store.snapshot.find((str(product_id), size, color))
        if line:
            self._store.update_quantity(product_id, line.quantity - 1, size, color)

    def remove(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> None:
        self._store.remove_item(product_id, size, color)

    def clear(self) -> None:
        self._store.clear()

    def render(self) -> str:
        return render_template("partials/cart_drawer.html", drawer=self.summary)
