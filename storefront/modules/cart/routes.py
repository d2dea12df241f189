from __future__ import annotations

from flask import Blueprint

from storefront.app.context import cart_store
from storefront.app.common.validation import get_json, require_fields, int_field, number_field, optional_str
from storefront.views.cart_drawer import CartDrawer

bp = Blueprint("cart", __name__)


def _line_ref(data):
    return str(data["product_id"]), optional_str(data, "size"), optional_str(data, "color")


def _drawer_command(command):
    """Run one drawer command and answer with the refreshed cart."""
    drawer = CartDrawer(cart_store())
    try:
        command(drawer)
        return drawer.summary
    finally:
        drawer.teardown()


@bp.get("/cart")
def get_cart():
    """GET /api/cart - Current cart lines, item count and total."""
    return _drawer_command(lambda drawer: None), 200


@bp.get("/cart/drawer")
def get_cart_drawer():
    """GET /api/cart/drawer - Rendered drawer fragment."""
    drawer = CartDrawer(cart_store())
    try:
        return drawer.render(), 200, {"Content-Type": "text/html; charset=utf-8"}
    finally:
        drawer.teardown()


@bp.post("/cart/add")
def add_to_cart():
    data = get_json()
    require_fields(data, ["product_id", "name", "price"])

    product_id, size, color = _line_ref(data)
    price = number_field(data, "price")
    qty = int_field(data, "quantity", 1)

    cart_store().add_item(
        product_id,
        str(data["name"]),
        price,
        qty,
        size=size,
        color=color,
        image=optional_str(data, "image"),
    )
    return _drawer_command(lambda drawer: None), 201


@bp.put("/cart/update")
def update_cart_item():
    """PUT /api/cart/update - Set a line's quantity; 0 or less removes it."""
    data = get_json()
    require_fields(data, ["product_id", "quantity"])

    product_id, size, color = _line_ref(data)
    qty = int_field(data, "quantity")
    cart_store().update_quantity(product_id, qty, size, color)
    return _drawer_command(lambda drawer: None), 200


@bp.post("/cart/increment")
def increment_cart_item():
    data = get_json()
    require_fields(data, ["product_id"])
    product_id, size, color = _line_ref(data)
    return _drawer_command(lambda drawer: drawer.increment(product_id, size, color)), 200


@bp.post("/cart/decrement")
def decrement_cart_item():
    data = get_json()
    require_fields(data, ["product_id"])
    product_id, size, color = _line_ref(data)
    return _drawer_command(lambda drawer: drawer.decrement(product_id, size, color)), 200


@bp.delete("/cart/remove")
def remove_cart_item():
    data = get_json()
    require_fields(data, ["product_id"])
    product_id, size, color = _line_ref(data)
    return _drawer_command(lambda drawer: drawer.remove(product_id, size, color)), 200


@bp.delete("/cart/clear")
def clear_cart():
    return _drawer_command(lambda drawer: drawer.clear()), 200


@bp.post("/cart/open")
def open_cart():
    return _drawer_command(lambda drawer: drawer.open()), 200


@bp.post("/cart/close")
def close_cart():
    return _drawer_command(lambda drawer: drawer.close()), 200
