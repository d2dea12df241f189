from flask import Flask

from storefront.modules.auth.routes import bp as auth_bp
from storefront.modules.catalog.routes import bp as catalog_bp
from storefront.modules.cart.routes import bp as cart_bp
from storefront.modules.orders.routes import bp as orders_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(catalog_bp, url_prefix="/api")
    app.register_blueprint(cart_bp, url_prefix="/api")
    app.register_blueprint(orders_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Storefront API",
            "version": "0.1.0",
            "endpoints": {
                "auth": ["/auth/login", "/auth/register", "/auth/logout", "/auth/session", "/users/me",
                         "/users/me/refresh"],
                "catalog": ["/products", "/products/featured", "/products/filters", "/products/refresh",
                            "/products/<slug>", "/products/<slug>/similar", "/categories", "/brands", "/brands/<slug>",
                            "/recently-viewed", "/banners", "/banners/carousel", "/banners/carousel/next",
                            "/banners/carousel/prev", "/banners/carousel/go"],
                "cart": ["/cart", "/cart/drawer", "/cart/add", "/cart/update", "/cart/increment",
                         "/cart/decrement", "/cart/remove", "/cart/clear", "/cart/open", "/cart/close"],
                "orders": ["/checkout", "/orders"],
            },
        }, 200
