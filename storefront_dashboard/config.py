"""
Configuration: order status registry, API settings, display constants.

ORDER_STATUS_REGISTRY maps each order status to its display label, chart
colour and whether the status is terminal (no further transitions).
"""

import os

from .exceptions import ConfigError

# ---------------------------------------------------------------------------
# API settings, overridable from the environment
# ---------------------------------------------------------------------------
DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_API_TIMEOUT = 10.0
DEFAULT_REFRESH_SECONDS = 30

API_URL_ENV = "STOREFRONT_API_URL"
API_TOKEN_ENV = "STOREFRONT_API_TOKEN"
API_TIMEOUT_ENV = "STOREFRONT_API_TIMEOUT"
REFRESH_SECONDS_ENV = "STOREFRONT_REFRESH_SECONDS"

# Admin endpoints, relative to the API base URL
ENDPOINTS: dict[str, str] = {
    "orders": "admin/orders",
    "order_status": "admin/orders/{order_id}/status",
    "products": "admin/products",
    "product": "admin/products/{product_id}",
    "users": "admin/users",
}

# ---------------------------------------------------------------------------
# Order Status Registry
# ---------------------------------------------------------------------------
# label: display label
# color: chart / badge colour
# terminal: no transitions allowed out of this status
ORDER_STATUS_REGISTRY: dict[str, dict] = {
    "pending": {"label": "Pending", "color": "#eab308", "terminal": False},
    "confirmed": {"label": "Confirmed", "color": "#3b82f6", "terminal": False},
    "preparing": {"label": "Preparing", "color": "#a855f7", "terminal": False},
    "out_for_delivery": {"label": "Out for Delivery", "color": "#f97316", "terminal": False},
    "processing": {"label": "Processing", "color": "#3b82f6", "terminal": False},
    "delivered": {"label": "Delivered", "color": "#22c55e", "terminal": True},
    "cancelled": {"label": "Cancelled", "color": "#ef4444", "terminal": True},
}
UNKNOWN_STATUS_COLOR = "#6b7280"

# Statuses offered in the order table's status selector
SELECTABLE_STATUSES = ("pending", "confirmed", "out_for_delivery", "delivered", "cancelled")

# Four-slice summary shown on the dashboard pie chart
HISTOGRAM_STATUSES = ("delivered", "processing", "pending", "cancelled")

PENDING_STATUS = "pending"
COMPLETED_STATUS = "delivered"
CANCELLED_STATUS = "cancelled"

# ---------------------------------------------------------------------------
# Aggregation constants
# ---------------------------------------------------------------------------
CUSTOMER_ROLE = "user"
RECENT_ORDERS_LIMIT = 5
TOP_PRODUCTS_LIMIT = 5
SHORT_ID_LENGTH = 6

FALLBACK_CUSTOMER_NAME = "N/A"
FALLBACK_PRODUCT_NAME = "Unknown Product"
FALLBACK_TEXT = "N/A"

CURRENCY_SYMBOL = "₹"

# ---------------------------------------------------------------------------
# Catalog constants
# ---------------------------------------------------------------------------
MAX_PRODUCT_IMAGES = 4
MAX_IMAGE_BYTES = 2 * 1024 * 1024
DEFAULT_EXPIRY_DAYS = 7

PRODUCT_CATEGORIES = [
    "Shop all",
    "Sanchi Stupa",
    "Warli House",
    "Tiger Crafting",
    "Bamboo Peacock",
    "Miniaure Ship",
    "Bamboo Trophy",
    "Bamboo Ganesha",
    "Bamboo Swords",
    "Tribal Mask -1",
    "Tribal Mask -2",
    "Bamboo Dry Fruit Tray",
    "Bamboo Tissue Paper Holder",
    "Bamboo Strip Tray",
    "Bamboo Mobile Booster",
    "Bamboo Card-Pen Holder",
]
DEFAULT_CATEGORY = "shop all"


def _env_number(name: str, default: float, cast=float):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


def get_api_settings() -> dict:
    """Return API settings resolved from the environment.

    Returns
    -------
    Dict with keys: base_url, token, timeout, refresh_seconds.
    """
    refresh_seconds = _env_number(REFRESH_SECONDS_ENV, DEFAULT_REFRESH_SECONDS, int)
    if refresh_seconds <= 0:
        raise ConfigError(f"{REFRESH_SECONDS_ENV} must be positive, got {refresh_seconds}")

    return {
        "base_url": os.environ.get(API_URL_ENV, DEFAULT_API_URL).rstrip("/"),
        "token": os.environ.get(API_TOKEN_ENV) or None,
        "timeout": _env_number(API_TIMEOUT_ENV, DEFAULT_API_TIMEOUT),
        "refresh_seconds": refresh_seconds,
    }
