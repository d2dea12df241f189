from __future__ import annotations

import click
from flask import Blueprint

from storefront.app.context import catalog
from storefront.app.extensions import db
from storefront.catalog.selectors import featured
from storefront.errors import NetworkError

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("init-db")
def init_db() -> None:
    """Create the stored_state table.

    Safe to run multiple times; existing rows are kept.
    """
    db.create_all()
    print("DB initialized (tables created).")


@cli_bp.cli.command("catalog")
def show_catalog() -> None:
    """Fetch the product list from the store API and summarize it."""
    try:
        products = catalog().refresh()
    except NetworkError as exc:
        raise click.ClickException(exc.message) from exc

    print(f"{len(products)} products, {len(featured(products))} featured.")
    for p in products:
        print(f"  {p.id}  {p.name}  {p.price:g}")
