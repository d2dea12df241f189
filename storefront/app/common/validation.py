from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional
from flask import request

from storefront.app.common.errors import abort_json


def get_json() -> Dict[str, Any]:
    if not request.is_json:
        abort_json(400, "invalid_json", "Request must be application/json")
    data = request.get_json(silent=True)
    if data is None or not isinstance(data, dict):
        abort_json(400, "invalid_json", "Malformed JSON body")
    return data


def require_fields(data: Dict[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if f not in data]
    if missing:
        abort_json(400, "validation_error", "Missing required fields", {"missing": missing})


def int_field(data: Dict[str, Any], name: str, default: Optional[int] = None) -> int:
    value = data.get(name, default)
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        abort_json(400, "validation_error", f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        abort_json(400, "validation_error", f"{name} must be an integer")


def number_field(data: Dict[str, Any], name: str) -> float:
    value = data.get(name)
    if isinstance(value, bool):
        abort_json(400, "validation_error", f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        abort_json(400, "validation_error", f"{name} must be a number")
    if not math.isfinite(number):
        abort_json(400, "validation_error", f"{name} must be a finite number")
    return number


def optional_str(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None
