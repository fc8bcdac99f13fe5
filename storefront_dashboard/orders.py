"""
Order management: status labels and colours, allowed transitions, and
applying server-side status updates to the orders table.
"""

import logging

import pandas as pd

from .config import (
    CANCELLED_STATUS,
    FALLBACK_CUSTOMER_NAME,
    ORDER_STATUS_REGISTRY,
    SELECTABLE_STATUSES,
    UNKNOWN_STATUS_COLOR,
)
from .exceptions import ValidationError
from .formatting import (
    display_or_fallback,
    format_delivery_time,
    format_order_date,
    short_order_id,
)
from .loaders.api_client import StorefrontApiClient
from .transforms import build_fact_order_items, build_fact_orders

logger = logging.getLogger(__name__)


def get_status_label(status: str) -> str:
    """Display label for a status; unknown statuses are shown as-is."""
    entry = ORDER_STATUS_REGISTRY.get(status)
    if entry is None:
        return status
    return entry["label"]


def get_status_color(status: str) -> str:
    return ORDER_STATUS_REGISTRY.get(status, {}).get("color", UNKNOWN_STATUS_COLOR)


def can_change_status(status: str) -> bool:
    """Delivered and cancelled orders are locked."""
    return not ORDER_STATUS_REGISTRY.get(status, {}).get("terminal", False)


def validate_status_transition(current: str, new: str) -> None:
    """Raise ValidationError unless ``current`` may move to ``new``."""
    if new not in SELECTABLE_STATUSES:
        raise ValidationError(f"Unsupported order status: {new!r}")
    if not can_change_status(current):
        raise ValidationError(f"Order is already {current} and cannot change status")


def _find_order(orders: pd.DataFrame, order_id: str) -> pd.Series:
    matches = orders[orders["order_id"] == order_id]
    if matches.empty:
        raise ValidationError(f"Order {order_id} not found")
    return matches.iloc[0]


def apply_order_update(orders: pd.DataFrame, updated_order: dict) -> pd.DataFrame:
    """Return a copy of ``orders`` with the updated order's row replaced.

    ``updated_order`` is the raw order record returned by the API. An
    order not present in the table is left out.
    """
    updated = build_fact_orders([updated_order])
    if updated.empty:
        return orders.copy()

    order_id = updated.iloc[0]["order_id"]
    result = orders.copy()
    mask = result["order_id"] == order_id
    if not mask.any():
        logger.warning("Updated order %s is not in the current table", order_id)
        return result

    # Rebuilt from records since cells of ``items`` hold lists
    position = mask.to_numpy().nonzero()[0][0]
    records = result.to_dict(orient="records")
    records[position] = updated.iloc[0].to_dict()
    return pd.DataFrame(records, columns=orders.columns, index=orders.index)


def change_order_status(
    client: StorefrontApiClient,
    orders: pd.DataFrame,
    order_id: str,
    new_status: str,
) -> pd.DataFrame:
    """Validate and submit a status change, returning the updated table."""
    current = _find_order(orders, order_id)["status"]
    validate_status_transition(current, new_status)
    updated_order = client.update_order_status(order_id, new_status)
    return apply_order_update(orders, updated_order)


def cancel_order(
    client: StorefrontApiClient,
    orders: pd.DataFrame,
    order_id: str,
) -> pd.DataFrame:
    return change_order_status(client, orders, order_id, CANCELLED_STATUS)


def format_address(address: dict | None) -> str:
    if not isinstance(address, dict) or not address:
        return display_or_fallback(None)
    parts = [address.get(key) for key in ("street", "city", "state")]
    text = ", ".join(str(p) for p in parts if p)
    pincode = address.get("pincode")
    if pincode:
        text = f"{text} - {pincode}" if text else str(pincode)
    return display_or_fallback(text)


def get_order_detail(orders: pd.DataFrame, order_id: str) -> dict:
    """Detail view of one order for the order modal.

    Returns
    -------
    Dict with keys: order_id, short_id, customer, email, phone, order_date,
    delivery_date, delivery_time, status, status_label, payment, address,
    notes, items (product, quantity, price, total), total_amount
    """
    order = _find_order(orders, order_id)

    items = build_fact_order_items(orders[orders["order_id"] == order_id].head(1))
    item_rows = []
    for _, item in items.iterrows():
        price = 0.0 if pd.isna(item["unit_price"]) else float(item["unit_price"])
        item_rows.append({
            "product": display_or_fallback(item["product_name"]),
            "quantity": int(item["quantity"]),
            "price": price,
            "total": price * int(item["quantity"]),
        })

    return {
        "order_id": order["order_id"],
        "short_id": short_order_id(order["order_id"]),
        "customer": display_or_fallback(order["customer_name"], FALLBACK_CUSTOMER_NAME),
        "email": display_or_fallback(order["customer_email"]),
        "phone": display_or_fallback(order["customer_phone"]),
        "order_date": format_order_date(order["created_at"]),
        "delivery_date": format_order_date(order["delivery_date"]),
        "delivery_time": format_delivery_time(order["delivery_time"]),
        "status": order["status"],
        "status_label": get_status_label(order["status"]),
        "payment": "Paid" if order["payment_status"] == "paid" else "Pending",
        "address": format_address(order["delivery_address"]),
        "notes": order["notes"] if isinstance(order["notes"], str) and order["notes"] else None,
        "items": item_rows,
        "total_amount": float(order["total_amount"]),
    }
