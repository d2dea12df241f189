"""Server-rendered storefront pages.

Pages compose the visitor's stores and the shared catalog; network failures
are shown inline and never break the page.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from storefront.app.common.auth import page_login_required
from storefront.app.context import (
    api_client,
    cart_store,
    carousels,
    catalog,
    customer_store,
    recently_viewed_store,
    visitor_carousel,
    visitor_id,
)
from storefront.catalog import selectors
from storefront.catalog.shipping import quote_shipping
from storefront.errors import NetworkError
from storefront.views.carousel import Carousel

logger = logging.getLogger(__name__)

ui_bp = Blueprint("ui", __name__)


def _products():
    """Cached products, or an empty list plus a message when the API is down."""
    try:
        return catalog().ensure_loaded(), None
    except NetworkError as exc:
        logger.warning("Catalog unavailable: %s", exc.message)
        return catalog().products, "Products could not be loaded right now."


@ui_bp.get("/")
def home():
    try:
        carousel = visitor_carousel(refresh=True)
    except NetworkError as exc:
        logger.warning("Banners unavailable: %s", exc.message)
        # an unstarted empty carousel renders the placeholder
        carousel = carousels().get(visitor_id()) or Carousel(
            interval=current_app.config["CAROUSEL_INTERVAL"],
            resume_delay=current_app.config["CAROUSEL_RESUME_DELAY"],
        )

    products, error = _products()
    return render_template(
        "pages/home.html",
        carousel=carousel,
        featured=selectors.featured(products),
        recently_viewed=recently_viewed_store().entries,
        error=error,
    )


@ui_bp.get("/shop")
def shop():
    search = (request.args.get("search") or "").strip()
    category = (request.args.get("category") or "").strip()
    page = request.args.get("page", 1, type=int)

    products, error = _products()
    matched = selectors.search(products, search)
    if category:
        matched = selectors.by_category(matched, category)

    return render_template(
        "pages/shop.html",
        page=selectors.paginate(matched, page, 24),
        search=search,
        category=category,
        error=error,
    )


@ui_bp.get("/categories")
def categories():
    try:
        items, error = selectors.root_categories(api_client().list_categories()), None
    except NetworkError as exc:
        logger.warning("Categories unavailable: %s", exc.message)
        items, error = [], "Categories could not be loaded right now."
    return render_template("pages/categories.html", categories=items, error=error)


@ui_bp.get("/brands")
def brands():
    try:
        items, error = api_client().list_brands(), None
    except NetworkError as exc:
        logger.warning("Brands unavailable: %s", exc.message)
        items, error = [], "Brands could not be loaded right now."
    return render_template("pages/brands.html", brands=items, error=error)


@ui_bp.get("/brands/<slug>")
def brand_detail(slug: str):
    try:
        brand = selectors.find_named(api_client().list_brands(), slug)
    except NetworkError as exc:
        logger.warning("Brands unavailable: %s", exc.message)
        return render_template("pages/brands.html", brands=[], error="Brands could not be loaded right now."), 502
    if brand is None:
        return render_template("pages/404.html"), 404

    products, error = _products()
    page = request.args.get("page", 1, type=int)
    return render_template(
        "pages/brand.html",
        brand=brand,
        page=selectors.paginate(selectors.by_brand(products, brand), page, 24),
        error=error,
    )


@ui_bp.get("/products/<slug>")
def product_detail(slug: str):
    products, error = _products()
    product = selectors.find_by_slug(products, slug)
    if product is None:
        return render_template("pages/404.html", error=error), 404

    recently_viewed_store().record_view(product)
    if request.args.get("cart") == "open":
        cart_store().open_cart()
    return render_template(
        "pages/product.html",
        product=product,
        similar=selectors.similar(products, product),
    )


@ui_bp.post("/products/<slug>/add")
def add_to_cart(slug: str):
    products, _ = _products()
    product = selectors.find_by_slug(products, slug)
    if product is None:
        return render_template("pages/404.html"), 404

    raw_quantity = request.form.get("quantity")
    quantity = 1 if raw_quantity is None else request.form.get("quantity", type=int)
    if quantity is None or quantity < 1:
        flash("Quantity must be at least 1.", "error")
        return redirect(url_for("ui.product_detail", slug=slug))

    cart = cart_store()
    cart.add_item(
        product.id,
        product.name,
        product.sale_price if product.is_sale and product.sale_price is not None else product.price,
        quantity,
        size=request.form.get("size") or None,
        color=request.form.get("color") or None,
        image=product.image,
    )
    flash(f"{product.name} added to your cart.", "success")
    return redirect(url_for("ui.product_detail", slug=slug, cart="open"))


@ui_bp.get("/checkout")
def checkout_page():
    cart = cart_store()
    return render_template("pages/checkout.html", cart=cart.snapshot, shipping=quote_shipping(cart.total))


@ui_bp.get("/login")
def login_page():
    if customer_store().is_authenticated:
        return redirect(url_for("ui.dashboard"))
    return render_template("pages/login.html")


@ui_bp.post("/login")
def login_post():
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""
    if not email or not password:
        return render_template("pages/login.html", error="Email and password are required.", email=email), 400

    try:
        token, customer = api_client().authenticate(email, password)
    except NetworkError as exc:
        if exc.status_code in (400, 401):
            return render_template("pages/login.html", error="Invalid email or password.", email=email), 401
        return render_template("pages/login.html", error=exc.message, email=email), 502

    customer_store().login(token, customer)
    flash("Logged in.", "success")
    return redirect(url_for("ui.dashboard"))


@ui_bp.get("/register")
def register_page():
    if customer_store().is_authenticated:
        return redirect(url_for("ui.dashboard"))
    return render_template("pages/register.html", form={})


@ui_bp.post("/register")
def register_post():
    form = {
        field: (request.form.get(field) or "").strip()
        for field in ("firstName", "lastName", "email")
    }
    form["email"] = form["email"].lower()
    password = request.form.get("password") or ""
    if not form["email"] or not password:
        return render_template("pages/register.html", error="Email and password are required.", form=form), 400

    details = {k: v for k, v in form.items() if v}
    details["password"] = password
    try:
        token, customer = api_client().register(details)
    except NetworkError as exc:
        if exc.status_code in (400, 409):
            return render_template("pages/register.html", error="Registration failed.", form=form), 400
        return render_template("pages/register.html", error=exc.message, form=form), 502

    customer_store().login(token, customer)
    flash("Welcome! Your account is ready.", "success")
    return redirect(url_for("ui.dashboard"))


@ui_bp.post("/logout")
def logout():
    customer_store().logout()
    flash("Logged out.", "success")
    return redirect(url_for("ui.home"))


@ui_bp.get("/dashboard")
@page_login_required
def dashboard():
    store = customer_store()
    error = None
    try:
        if store.refresh_customer() is None:
            flash("Your session has expired, please log in again.", "info")
            return redirect(url_for("ui.login_page"))
        orders = api_client().list_my_orders(store.token)
    except NetworkError as exc:
        logger.warning("Dashboard data unavailable: %s", exc.message)
        error = "We could not load your latest account data."
        orders = []

    return render_template(
        "pages/dashboard.html",
        customer=store.customer,
        orders=orders[:5],
        order_count=len(orders),
        total_spent=sum(o.get("totalAmount") or 0 for o in orders),
        error=error,
    )


@ui_bp.get("/dashboard/profile")
@page_login_required
def profile():
    return render_template("pages/profile.html", customer=customer_store().customer)


@ui_bp.post("/dashboard/profile")
@page_login_required
def profile_post():
    store = customer_store()
    changes = {
        field: (request.form.get(field) or "").strip()
        for field in ("firstName", "lastName", "phone")
        if request.form.get(field) is not None
    }

    try:
        api_client().update_profile(store.token, changes)
        if store.refresh_customer() is None:
            flash("Your session has expired, please log in again.", "info")
            return redirect(url_for("ui.login_page"))
    except NetworkError as exc:
        if exc.is_unauthorized:
            store.logout()
            flash("Your session has expired, please log in again.", "info")
            return redirect(url_for("ui.login_page"))
        return render_template("pages/profile.html", customer=store.customer, error=exc.message), 502

    flash("Profile updated.", "success")
    return redirect(url_for("ui.profile"))


@ui_bp.get("/help")
def help_page():
    return render_template("pages/help.html")


@ui_bp.get("/blog")
def blog():
    return render_template("pages/blog.html")
