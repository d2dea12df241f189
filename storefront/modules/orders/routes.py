from __future__ import annotations

from flask import Blueprint, request

from storefront.app.context import api_client, cart_store, customer_store
from storefront.app.common.auth import login_required
from storefront.app.common.errors import abort_json
from storefront.app.common.validation import get_json, require_fields
from storefront.catalog.selectors import paginate
from storefront.catalog.shipping import quote_shipping

bp = Blueprint("orders", __name__)

ADDRESS_FIELDS = ["fullName", "phone", "address", "city", "country"]


def checkout_summary(cart) -> dict:
    shipping = quote_shipping(cart.total)
    return {
        "items": [line.to_dict() for line in cart.lines],
        "item_count": cart.item_count,
        "subtotal": cart.total,
        "shipping": shipping,
        "total": cart.total + shipping["total_cost"],
    }


def order_payload(cart, address: dict, customer: dict | None) -> dict:
    summary = checkout_summary(cart)
    return {
        "items": [
            {
                "product": line.product_id,
                "name": line.name,
                "price": line.price,
                "quantity": line.quantity,
                "size": line.size,
                "color": line.color,
            }
            for line in cart.lines
        ],
        "shippingAddress": address,
        "customer": (customer or {}).get("_id"),
        "subtotal": summary["subtotal"],
        "shippingCost": summary["shipping"]["total_cost"],
        "totalAmount": summary["total"],
    }


@bp.get("/checkout")
def checkout_quote():
    """GET /api/checkout - Cart totals with the shipping quote."""
    return checkout_summary(cart_store().snapshot), 200


@bp.post("/checkout")
def place_order():
    """POST /api/checkout - Submit the cart as an order; the cart is emptied on success."""
    data = get_json()
    require_fields(data, ["shippingAddress"])
    address = data["shippingAddress"]
    if not isinstance(address, dict):
        abort_json(400, "validation_error", "shippingAddress must be an object")
    missing = [f for f in ADDRESS_FIELDS if not address.get(f)]
    if missing:
        abort_json(400, "validation_error", "Missing address fields", {"missing": missing})

    cart = cart_store()
    if not cart.lines:
        abort_json(409, "conflict", "Cart is empty")

    session = customer_store().snapshot
    order = api_client().create_order(order_payload(cart.snapshot, address, session.customer), token=session.token)
    cart.clear()
    return order, 201


@bp.get("/orders")
@login_required
def my_orders():
    """GET /api/orders - The signed-in customer's orders.

    Query params:
      - status
      - page, limit
    """
    page = request.args.get("page", 1, type=int)
    limit = min(request.args.get("limit", 20, type=int), 100)
    orders = api_client().list_my_orders(customer_store().token, status=request.args.get("status"))
    return paginate(orders, page, limit).to_dict(), 200
