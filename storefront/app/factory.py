from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from storefront.app.config import Config
from storefront.app.extensions import db, migrate, cors
from storefront.app.common.errors import ApiError, from_storefront_error
from storefront.app.common.request_context import init_request_id, mirror_request_id
from storefront.app.context import cart_store, close_stores, customer_store
from storefront.app.api.register import register_api_blueprints
from storefront.app.cli import cli_bp
from storefront.app.ui import ui_bp
from storefront.catalog.cache import ProductCatalog
from storefront.catalog.client import ApiClient
from storefront.errors import StorefrontError
from storefront.views.carousel import Carousel, CarouselRegistry, ThreadScheduler
from storefront.views.cart_drawer import cart_summary

PACKAGE_DIR = Path(__file__).resolve().parent.parent


def create_app(
    config_object: type[Config] = Config,
    api_client: Optional[ApiClient] = None,
    scheduler=None,
) -> Flask:
    load_dotenv()
    app = Flask(
        __name__,
        instance_relative_config=True,
        template_folder=str(PACKAGE_DIR / "templates"),
        static_folder=str(PACKAGE_DIR / "static"),
    )
    app.config.from_object(config_object)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})

    # Remote API + shared catalog cache
    client = api_client or ApiClient.from_config(app.config)
    app.extensions["storefront.api"] = client
    app.extensions["storefront.catalog"] = ProductCatalog(client.list_products)

    # Hero carousels run server-side, one per visitor
    scheduler = scheduler or ThreadScheduler()
    app.extensions["storefront.carousels"] = CarouselRegistry(
        lambda banners: Carousel(
            banners,
            scheduler=scheduler,
            interval=app.config["CAROUSEL_INTERVAL"],
            resume_delay=app.config["CAROUSEL_RESUME_DELAY"],
        ),
        capacity=app.config["CAROUSEL_LIVE_LIMIT"],
    )

    @app.before_request
    def _before_request():
        init_request_id()

    app.after_request(mirror_request_id)
    app.teardown_request(close_stores)

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    register_api_blueprints(app)
    app.register_blueprint(cli_bp)
    app.register_blueprint(ui_bp)

    @app.context_processor
    def inject_nav():
        """Navbar data: cart badge and the signed-in customer."""
        return {
            "nav_cart": cart_summary(cart_store().snapshot),
            "nav_customer": customer_store().customer,
        }

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(getattr(g, "request_id", None))), err.status_code

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(err: StorefrontError):
        api_err = from_storefront_error(err)
        if api_err.status_code >= 500:
            app.logger.warning("%s on %s: %s", err.code, request.path, err.message)
        return jsonify(api_err.to_dict(getattr(g, "request_id", None))), api_err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        if err.code == 404 and not request.path.startswith("/api/"):
            return render_template("pages/404.html"), 404

        # Normalize Werkzeug errors into our JSON shape
        payload = {
            "error": {
                "code": "http_error",
                "message": err.description,
                "details": {"name": err.name},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        payload = {
            "error": {
                "code": "internal_error",
                "message": "Internal server error",
                "details": {},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), 500

    return app
