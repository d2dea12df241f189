from __future__ import annotations

from flask import Blueprint

from storefront.app.context import api_client, customer_store
from storefront.app.common.validation import get_json, require_fields
from storefront.app.common.errors import abort_json
from storefront.app.common.auth import login_required
from storefront.errors import NetworkError

bp = Blueprint("auth", __name__)

PROFILE_FIELDS = ("firstName", "lastName", "email", "phone")


def _session_response():
    session = customer_store().snapshot
    return {"authenticated": session.is_authenticated, "customer": session.customer}


@bp.post("/auth/login")
def login():
    """POST /api/auth/login - Authenticate against the store API and keep the session."""
    data = get_json()
    require_fields(data, ["email", "password"])

    email = str(data["email"]).strip().lower()
    if not email or not data["password"]:
        abort_json(400, "validation_error", "Email and password are required")

    token, customer = api_client().authenticate(email, str(data["password"]))
    customer_store().login(token, customer)
    return _session_response(), 200


@bp.post("/auth/register")
def register():
    """POST /api/auth/register - Create a customer account and sign it in."""
    data = get_json()
    require_fields(data, ["email", "password"])

    details = {k: str(data[k]).strip() for k in PROFILE_FIELDS if data.get(k) is not None}
    details["email"] = details.get("email", "").lower()
    if not details["email"] or not data["password"]:
        abort_json(400, "validation_error", "Email and password are required")
    details["password"] = str(data["password"])

    try:
        token, customer = api_client().register(details)
    except NetworkError as exc:
        # the store answers 400 or 409 for rejected details such as a taken email
        if exc.status_code in (400, 409):
            abort_json(
                exc.status_code,
                "registration_failed",
                "Registration failed",
                {"upstream_status": exc.status_code},
            )
        raise
    customer_store().login(token, customer)
    return _session_response(), 201


@bp.post("/auth/logout")
def logout():
    """POST /api/auth/logout - Forget the token and profile."""
    customer_store().logout()
    return _session_response(), 200


@bp.get("/auth/session")
def current_session():
    return _session_response(), 200


@bp.get("/users/me")
@login_required
def me():
    """GET /api/users/me - Profile held in the session."""
    return customer_store().customer, 200


@bp.post("/users/me/refresh")
@login_required
def refresh_me():
    """POST /api/users/me/refresh - Re-fetch the profile; a 401 ends the session."""
    profile = customer_store().refresh_customer()
    if profile is None:
        abort_json(401, "unauthorized", "Session expired, please log in again")
    return profile, 200


@bp.patch("/users/me")
@login_required
def update_me():
    """PATCH /api/users/me - Forward profile changes, then refresh the session copy."""
    data = get_json()
    changes = {k: data[k] for k in PROFILE_FIELDS if k in data}
    if not changes:
        abort_json(400, "validation_error", "No profile fields to update", {"allowed": list(PROFILE_FIELDS)})

    store = customer_store()
    try:
        api_client().update_profile(store.token, changes)
    except NetworkError as exc:
        if exc.is_unauthorized:
            store.logout()
            abort_json(401, "unauthorized", "Session expired, please log in again")
        raise
    profile = store.refresh_customer()
    if profile is None:
        abort_json(401, "unauthorized", "Session expired, please log in again")
    return profile, 200
