from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.errors import NetworkError, StorefrontError, ValidationError


@dataclass
class ApiError(Exception):
    """Raise to return a consistent JSON error response."""

    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self, request_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or {},
                "request_id": request_id,
            }
        }
        return payload


def abort_json(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper."""
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


def from_storefront_error(err: StorefrontError) -> ApiError:
    """Map a core failure onto the HTTP status the browser should see."""
    if isinstance(err, ValidationError):
        status = 400
    elif isinstance(err, NetworkError):
        status = 401 if err.is_unauthorized else 502
    else:
        status = 500

    details = dict(err.details)
    if isinstance(err, NetworkError) and err.status_code is not None:
        details["upstream_status"] = err.status_code
    return ApiError(status_code=status, code=err.code, message=err.message, details=details)
