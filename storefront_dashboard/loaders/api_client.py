"""
Client for the storefront admin REST API.

Wraps the endpoints the dashboard needs: order, product and user listings,
order status updates, and product create/update/delete. Login and session
handling live outside this client; a bearer token is sent when configured.
"""

import logging
from typing import Any

import requests

from ..config import CANCELLED_STATUS, ENDPOINTS, get_api_settings
from ..exceptions import ApiError

logger = logging.getLogger(__name__)


def _unwrap_list(payload: Any, resource: str) -> list[dict]:
    """Accept a bare JSON list or a ``{"data": [...]}`` envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", resource):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    raise ApiError(f"Unexpected {resource} payload: {type(payload).__name__}")


class StorefrontApiClient:
    """Admin API client backed by a requests.Session."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        settings = None
        if base_url is None or timeout is None:
            settings = get_api_settings()
        self.base_url = (base_url or settings["base_url"]).rstrip("/")
        self.timeout = timeout if timeout is not None else settings["timeout"]
        if token is None and settings is not None:
            token = settings["token"]

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_env(cls) -> "StorefrontApiClient":
        settings = get_api_settings()
        return cls(settings["base_url"], settings["token"], settings["timeout"])

    def _url(self, endpoint: str, **params) -> str:
        return f"{self.base_url}/{ENDPOINTS[endpoint].format(**params)}"

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.exception("%s %s failed", method, url)
            raise ApiError(f"{method} {url} failed: {exc}") from exc

        if not response.ok:
            message = response.reason or "request failed"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            logger.error("%s %s returned %d: %s", method, url, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"{method} {url} returned invalid JSON") from exc

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    def get_orders(self) -> list[dict]:
        orders = _unwrap_list(self._request("GET", self._url("orders")), "orders")
        logger.info("Fetched %d orders", len(orders))
        return orders

    def get_products(self) -> list[dict]:
        products = _unwrap_list(self._request("GET", self._url("products")), "products")
        logger.info("Fetched %d products", len(products))
        return products

    def get_users(self) -> list[dict]:
        users = _unwrap_list(self._request("GET", self._url("users")), "users")
        logger.info("Fetched %d users", len(users))
        return users

    def fetch_all(self) -> tuple[list[dict], list[dict], list[dict]]:
        """Fetch orders, products and users for one dashboard refresh."""
        return self.get_orders(), self.get_products(), self.get_users()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def update_order_status(self, order_id: str, status: str) -> dict:
        """Set an order's status and return the updated order record."""
        payload = self._request(
            "PUT",
            self._url("order_status", order_id=order_id),
            json={"status": status},
        )
        if isinstance(payload, dict) and isinstance(payload.get("order"), dict):
            order = payload["order"]
        elif isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            order = payload["data"].get("order", payload["data"])
        else:
            raise ApiError(f"Status update for {order_id} returned no order")
        logger.info("Order %s status set to %s", order_id, status)
        return order

    def cancel_order(self, order_id: str) -> dict:
        return self.update_order_status(order_id, CANCELLED_STATUS)

    def create_product(self, fields: dict) -> Any:
        result = self._request("POST", self._url("products"), data=fields)
        logger.info("Created product %s", fields.get("name"))
        return result

    def update_product(self, product_id: str, fields: dict) -> Any:
        result = self._request("PUT", self._url("product", product_id=product_id), data=fields)
        logger.info("Updated product %s", product_id)
        return result

    def delete_product(self, product_id: str) -> None:
        self._request("DELETE", self._url("product", product_id=product_id))
        logger.info("Deleted product %s", product_id)
