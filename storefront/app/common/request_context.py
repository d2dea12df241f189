import re
import uuid

from flask import g, request

REQUEST_ID_HEADER = "X-Request-ID"

# ids we accept from a proxy; anything else gets a fresh one
_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def init_request_id() -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER, "")
    g.request_id = inbound if _SAFE_ID.match(inbound) else uuid.uuid4().hex
    return g.request_id


def mirror_request_id(response):
    """after_request hook: echo the id so browser errors can be matched to logs."""
    if "request_id" in g:
        response.headers[REQUEST_ID_HEADER] = g.request_id
    return response
