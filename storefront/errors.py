"""Failure taxonomy shared by the stores, the API client and the views."""

from __future__ import annotations

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for every error raised by the storefront core."""

    code = "storefront_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(StorefrontError):
    """A mutation was called with an invalid argument; state is unchanged."""

    code = "validation_error"


class StorageError(StorefrontError):
    """Durable storage could not be read or written."""

    code = "storage_error"


class ParseError(StorefrontError):
    """A persisted record or an API payload did not have the expected shape."""

    code = "parse_error"


class NetworkError(StorefrontError):
    """The remote API call failed (connectivity, timeout, non-2xx, bad payload)."""

    code = "network_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401
