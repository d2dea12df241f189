"""HTTP client for the remote storefront REST API.

Every call goes through `_request`, which attaches the bearer token when one
is given and maps transport failures, non-2xx answers and undecodable bodies
onto `NetworkError`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from storefront.catalog.normalize import (
    Banner,
    Brand,
    Category,
    Product,
    normalize_banner,
    normalize_brand,
    normalize_category,
    normalize_product,
)
from storefront.errors import NetworkError, ParseError

logger = logging.getLogger(__name__)


def resolve_base_url(base_url: str, origin: str) -> str:
    """Relative bases like `/api` are anchored on the configured origin."""
    if base_url.startswith(("http://", "https://")):
        return base_url.rstrip("/")
    return f"{origin.rstrip('/')}/{base_url.strip('/')}"


def _records(payload: Any, normalize: Callable[[Any], Any], kind: str) -> List[Any]:
    """A bare list or a `{"data": [...]}` envelope; malformed entries are skipped."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]
    if not isinstance(payload, list):
        raise NetworkError(f"{kind} list response is not a list") from ParseError("expected list")

    records = []
    for raw in payload:
        try:
            records.append(normalize(raw))
        except ParseError as exc:
            logger.warning("Skipping malformed %s: %s", kind.lower(), exc)
    return records


def _session_pair(payload: Any) -> Tuple[str, Dict[str, Any]]:
    token = payload.get("token") if isinstance(payload, dict) else None
    customer = payload.get("customer") if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token or not isinstance(customer, dict):
        raise NetworkError("Invalid response from server") from ParseError(
            "auth response needs token and customer"
        )
    return token, customer


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.BaseTransport] = None) -> "ApiClient":
        return cls(
            resolve_base_url(config["API_BASE_URL"], config["API_ORIGIN"]),
            timeout=config["API_TIMEOUT"],
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            logger.error("API request %s %s failed: %s", method, path, exc)
            raise NetworkError(f"Could not reach the store API ({exc.__class__.__name__})") from exc

        if not response.is_success:
            logger.warning("API request %s %s answered %s", method, path, response.status_code)
            raise NetworkError(
                f"Store API answered {response.status_code}",
                status_code=response.status_code,
                details={"path": path},
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                "Store API returned a malformed response",
                status_code=response.status_code,
            ) from ParseError(str(exc))

    # --- catalog ---
    def list_products(self) -> List[Product]:
        payload = self._request("GET", "/products", params={"activeOnly": "true"})
        if not isinstance(payload, list):
            raise NetworkError("Product list response is not a list") from ParseError("expected list")

        products = []
        for raw in payload:
            try:
                products.append(normalize_product(raw))
            except ParseError as exc:
                logger.warning("Skipping malformed product: %s", exc)
        return products

    def get_product(self, product_id: str) -> Product:
        payload = self._request("GET", f"/products/{product_id}")
        try:
            return normalize_product(payload)
        except ParseError as exc:
            raise NetworkError("Product response is malformed") from exc

    def list_banners(self) -> List[Banner]:
        payload = self._request("GET", "/banners", params={"activeOnly": "true"})
        if not isinstance(payload, list):
            raise NetworkError("Banner list response is not a list") from ParseError("expected list")

        banners = []
        for raw in payload:
            try:
                banners.append(normalize_banner(raw))
            except ParseError as exc:
                logger.warning("Skipping malformed banner: %s", exc)
        return banners

    def list_categories(self) -> List[Category]:
        payload = self._request("GET", "/categories", params={"activeOnly": "true"})
        return _records(payload, normalize_category, "Category")

    def list_brands(self) -> List[Brand]:
        payload = self._request("GET", "/brands", params={"activeOnly": "true"})
        return _records(payload, normalize_brand, "Brand")

    # --- customers ---
    def authenticate(self, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        """POST /auth/login; the answer must carry `token` and `customer`."""
        payload = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return _session_pair(payload)

    def register(self, details: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """POST /auth/register; answers like login, signing the new customer in."""
        payload = self._request("POST", "/auth/register", json=details)
        return _session_pair(payload)

    def get_profile(self, token: str) -> Dict[str, Any]:
        payload = self._request("GET", "/customers/profile", token=token)
        if not isinstance(payload, dict):
            raise NetworkError("Profile response is malformed") from ParseError("expected object")
        return payload

    def update_profile(self, token: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._request("PATCH", "/customers/profile", token=token, json=changes)
        if not isinstance(payload, dict):
            raise NetworkError("Profile response is malformed") from ParseError("expected object")
        return payload

    # --- orders ---
    def list_my_orders(self, token: str, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else None
        payload = self._request("GET", "/orders/my-orders", token=token, params=params)
        if not isinstance(payload, list):
            raise NetworkError("Order list response is not a list") from ParseError("expected list")
        return payload

    def create_order(self, order: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        payload = self._request("POST", "/orders", token=token, json=order)
        if not isinstance(payload, dict):
            raise NetworkError("Order response is malformed") from ParseError("expected object")
        return payload
