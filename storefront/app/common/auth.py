"""Guards for views that need an authenticated customer session.

The session itself (bearer token + profile) lives in the visitor's
CustomerSessionStore; these decorators only check it.
"""

from functools import wraps
from typing import Callable, TypeVar, Any

from flask import flash, redirect, url_for

from storefront.app.common.errors import abort_json
from storefront.app.context import customer_store

F = TypeVar("F", bound=Callable[..., Any])


def login_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not customer_store().is_authenticated:
            abort_json(401, "unauthorized", "Authentication required")
        return fn(*args, **kwargs)

    return wrapper  # type: ignore


def page_login_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not customer_store().is_authenticated:
            flash("Please log in to continue.", "info")
            return redirect(url_for("ui.login_page"))
        return fn(*args, **kwargs)

    return wrapper  # type: ignore
