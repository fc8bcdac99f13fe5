"""
Data transforms: normalise raw admin API records into fact and dimension
tables with a fixed column schema.

Optional fields in the API payloads become explicit nullable columns.
Substitutions for missing values happen here once, so the metrics layer
can rely on the schema.
"""

import logging
from typing import Any

import pandas as pd

from .loaders.utils import normalise_date, ref_field, ref_id, safe_float, safe_int

logger = logging.getLogger(__name__)


ORDER_COLUMNS = [
    "order_id",
    "created_at",
    "total_amount",
    "status",
    "customer_id",
    "customer_name",
    "customer_email",
    "customer_phone",
    "payment_status",
    "delivery_date",
    "delivery_time",
    "delivery_address",
    "notes",
    "items",
]

ORDER_ITEM_COLUMNS = [
    "order_id",
    "product_id",
    "product_name",
    "quantity",
    "unit_price",
    "line_total",
]

PRODUCT_COLUMNS = [
    "product_id",
    "name",
    "price",
    "category",
    "stock",
    "discount",
    "is_discount_active",
    "discount_start",
    "discount_end",
    "offer_price",
    "is_offer_active",
    "offer_start",
    "offer_end",
    "length",
    "width",
    "height",
    "image_count",
]

CUSTOMER_COLUMNS = ["user_id", "name", "email", "phone", "role"]


def _record_id(record: dict) -> str | None:
    return ref_id(record.get("_id", record.get("id")))


def _normalise_item(item: Any, order_id: str) -> dict | None:
    """Normalise one line item; returns None for non-dict entries."""
    if not isinstance(item, dict):
        logger.warning("Order %s has a malformed line item: %r", order_id, item)
        return None

    product = item.get("product")
    product_id = ref_id(product)
    if product_id is None:
        logger.warning("Order %s has a line item without a product reference", order_id)

    quantity = safe_int(item.get("quantity"))
    if quantity is None:
        logger.warning("Order %s line item for %s has no quantity, using 0", order_id, product_id)
        quantity = 0

    # Price carried on the item wins over the populated product's price
    unit_price = safe_float(item.get("price"))
    if unit_price is None:
        unit_price = safe_float(ref_field(product, "price"))

    return {
        "product_id": product_id,
        "product_name": ref_field(product, "name"),
        "quantity": quantity,
        "unit_price": unit_price,
    }


def build_fact_orders(raw_orders: list[dict]) -> pd.DataFrame:
    """Normalise raw order records into the orders fact table.

    Parameters
    ----------
    raw_orders : Order records as returned by the admin API.

    Returns
    -------
    fact_orders DataFrame with columns:
        order_id, created_at, total_amount, status, customer_id,
        customer_name, customer_email, customer_phone, payment_status,
        delivery_date, delivery_time, delivery_address, notes, items

    ``items`` holds a list of normalised line-item dicts per order
    (product_id, product_name, quantity, unit_price).
    """
    rows = []

    for raw in raw_orders:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed order record: %r", raw)
            continue

        order_id = _record_id(raw)
        if order_id is None:
            logger.warning("Order record without an id, using empty id")
            order_id = ""

        total_amount = safe_float(raw.get("totalAmount"))
        if total_amount is None:
            logger.warning("Order %s has no totalAmount, counting it as 0", order_id)
            total_amount = 0.0

        user = raw.get("user")
        raw_items = raw.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        items = [
            item
            for item in (_normalise_item(raw_item, order_id) for raw_item in raw_items)
            if item is not None
        ]

        address = raw.get("deliveryAddress")
        rows.append({
            "order_id": order_id,
            "created_at": normalise_date(raw.get("createdAt")),
            "total_amount": total_amount,
            "status": raw.get("status"),
            "customer_id": ref_id(user),
            "customer_name": ref_field(user, "name"),
            "customer_email": ref_field(user, "email"),
            "customer_phone": ref_field(user, "phone"),
            "payment_status": raw.get("paymentStatus"),
            "delivery_date": normalise_date(raw.get("deliveryDate")),
            "delivery_time": raw.get("deliveryTime"),
            "delivery_address": address if isinstance(address, dict) else None,
            "notes": raw.get("notes"),
            "items": items,
        })

    df = pd.DataFrame(rows, columns=ORDER_COLUMNS)
    df["created_at"] = pd.to_datetime(df["created_at"])
    df["delivery_date"] = pd.to_datetime(df["delivery_date"])
    df["total_amount"] = df["total_amount"].astype("float64")

    logger.info("Built fact_orders with %d rows", len(df))
    return df


def build_fact_order_items(orders: pd.DataFrame) -> pd.DataFrame:
    """Explode the ``items`` column of fact_orders into one row per line item.

    Returns
    -------
    fact_order_items DataFrame with columns:
        order_id, product_id, product_name, quantity, unit_price, line_total

    Row order follows order order, then item order within each order.
    """
    rows = []

    for order_id, items in zip(orders["order_id"], orders["items"]):
        if not isinstance(items, list):
            continue
        for item in items:
            rows.append({
                "order_id": order_id,
                "product_id": item.get("product_id"),
                "product_name": item.get("product_name"),
                "quantity": item.get("quantity", 0),
                "unit_price": item.get("unit_price"),
            })

    df = pd.DataFrame(rows, columns=ORDER_ITEM_COLUMNS[:-1])
    df["quantity"] = df["quantity"].fillna(0).astype("int64")
    df["unit_price"] = pd.to_numeric(df["unit_price"], errors="coerce").astype("float64")
    df["line_total"] = df["quantity"] * df["unit_price"]

    logger.debug("Built fact_order_items with %d rows", len(df))
    return df


def build_dim_product(raw_products: list[dict]) -> pd.DataFrame:
    """Normalise raw product records into the product dimension.

    Records without an id cannot be referenced by orders and are dropped.

    Returns
    -------
    dim_product DataFrame with columns:
        product_id, name, price, category, stock, discount,
        is_discount_active, discount_start, discount_end, offer_price,
        is_offer_active, offer_start, offer_end, length, width, height,
        image_count
    """
    rows = []

    for raw in raw_products:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed product record: %r", raw)
            continue

        product_id = _record_id(raw)
        if product_id is None:
            logger.warning("Dropping product without an id: %s", raw.get("name"))
            continue

        discount = safe_float(raw.get("discount"))
        images = raw.get("images")
        rows.append({
            "product_id": product_id,
            "name": raw.get("name"),
            "price": safe_float(raw.get("price")),
            "category": raw.get("category"),
            "stock": safe_int(raw.get("stock")),
            "discount": discount if discount is not None else 0.0,
            "is_discount_active": bool(raw.get("isDiscountActive", False)),
            "discount_start": normalise_date(raw.get("discountStartDate")),
            "discount_end": normalise_date(raw.get("discountEndDate")),
            "offer_price": safe_float(raw.get("offerPrice")),
            "is_offer_active": bool(raw.get("isOfferActive", False)),
            "offer_start": normalise_date(raw.get("offerStartDate")),
            "offer_end": normalise_date(raw.get("offerEndDate")),
            "length": safe_float(raw.get("length")),
            "width": safe_float(raw.get("width")),
            "height": safe_float(raw.get("height")),
            "image_count": len(images) if isinstance(images, list) else 0,
        })

    df = pd.DataFrame(rows, columns=PRODUCT_COLUMNS)
    for col in ("discount_start", "discount_end", "offer_start", "offer_end"):
        df[col] = pd.to_datetime(df[col])
    for col in ("price", "discount", "offer_price", "length", "width", "height"):
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")

    logger.info("Built dim_product with %d rows", len(df))
    return df


def build_dim_customer(raw_users: list[dict]) -> pd.DataFrame:
    """Normalise raw user records into the customer dimension.

    All roles are kept; the metrics layer filters to shoppers.

    Returns
    -------
    dim_customer DataFrame with columns: user_id, name, email, phone, role
    """
    rows = []

    for raw in raw_users:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed user record: %r", raw)
            continue
        rows.append({
            "user_id": _record_id(raw),
            "name": raw.get("name"),
            "email": raw.get("email"),
            "phone": raw.get("phone"),
            "role": raw.get("role"),
        })

    df = pd.DataFrame(rows, columns=CUSTOMER_COLUMNS)
    logger.info("Built dim_customer with %d rows", len(df))
    return df
