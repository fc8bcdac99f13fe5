"""
Dashboard metric computation — pure functions with no side effects.

Provides month-over-month revenue change, summary counters, the recent
orders view, the order status histogram, the monthly revenue trend and the
top product ranking. Inputs are the tables built by ``transforms``; none of
them is modified.
"""

import logging
from typing import Any

import pandas as pd

from .config import (
    COMPLETED_STATUS,
    CUSTOMER_ROLE,
    FALLBACK_CUSTOMER_NAME,
    FALLBACK_PRODUCT_NAME,
    HISTOGRAM_STATUSES,
    PENDING_STATUS,
    RECENT_ORDERS_LIMIT,
    TOP_PRODUCTS_LIMIT,
)
from .formatting import display_or_fallback, format_order_date, short_order_id
from .transforms import build_fact_order_items

logger = logging.getLogger(__name__)

RECENT_ORDER_COLUMNS = ["order_id", "short_id", "customer", "amount", "status", "date"]
REVENUE_TREND_COLUMNS = ["month", "revenue"]
TOP_PRODUCT_COLUMNS = ["product_id", "name", "quantity", "revenue"]


def calc_pct_change(current: float, previous: float) -> float:
    """Return the percentage change from previous to current.

    Returns 0.0 when previous == 0.
    """
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) of the calendar month before the given one."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def to_reference_timestamp(reference_date: Any) -> pd.Timestamp:
    """Coerce a reference date to a timezone-naive UTC pd.Timestamp."""
    ts = pd.Timestamp(reference_date)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def _amounts(orders: pd.DataFrame) -> pd.Series:
    return orders["total_amount"].fillna(0.0)


def _in_month(orders: pd.DataFrame, year: int, month: int) -> pd.Series:
    created = orders["created_at"]
    return (created.dt.year == year) & (created.dt.month == month)


def compute_summary(
    orders: pd.DataFrame,
    products: pd.DataFrame,
    customers: pd.DataFrame,
    reference_date: Any,
) -> dict:
    """Return the dashboard summary counters.

    Parameters
    ----------
    orders : fact_orders DataFrame.
    products : dim_product DataFrame.
    customers : dim_customer DataFrame (all roles).
    reference_date : Timestamp treated as "now" for month partitioning.

    Returns
    -------
    Dict with keys:
        total_orders, total_revenue, total_products, total_customers,
        pending_orders, completed_orders, revenue_change,
        current_month_revenue, last_month_revenue, average_order_value
    """
    ref = to_reference_timestamp(reference_date)
    last_year, last_month = previous_month(ref.year, ref.month)

    amounts = _amounts(orders)
    current_month_revenue = float(amounts[_in_month(orders, ref.year, ref.month)].sum())
    last_month_revenue = float(amounts[_in_month(orders, last_year, last_month)].sum())

    total_orders = int(len(orders))
    total_revenue = float(amounts.sum())
    average_order_value = total_revenue / total_orders if total_orders else 0.0

    statuses = orders["status"]

    return {
        "total_orders": total_orders,
        "total_revenue": total_revenue,
        "total_products": int(len(products)),
        "total_customers": int((customers["role"] == CUSTOMER_ROLE).sum()),
        "pending_orders": int((statuses == PENDING_STATUS).sum()),
        "completed_orders": int((statuses == COMPLETED_STATUS).sum()),
        "revenue_change": calc_pct_change(current_month_revenue, last_month_revenue),
        "current_month_revenue": current_month_revenue,
        "last_month_revenue": last_month_revenue,
        "average_order_value": average_order_value,
    }


def compute_recent_orders(
    orders: pd.DataFrame,
    limit: int = RECENT_ORDERS_LIMIT,
) -> pd.DataFrame:
    """Newest orders first, projected for the recent-orders table.

    The sort is stable, so orders sharing a timestamp keep their input
    order. Orders without a timestamp sort last.

    Returns
    -------
    DataFrame with columns: order_id, short_id, customer, amount, status, date
    """
    recent = orders.sort_values(
        "created_at", ascending=False, kind="stable", na_position="last"
    ).head(max(limit, 0))

    rows = []
    for _, order in recent.iterrows():
        rows.append({
            "order_id": order["order_id"],
            "short_id": short_order_id(order["order_id"]),
            "customer": display_or_fallback(order["customer_name"], FALLBACK_CUSTOMER_NAME),
            "amount": 0.0 if pd.isna(order["total_amount"]) else float(order["total_amount"]),
            "status": order["status"],
            "date": format_order_date(order["created_at"]),
        })

    return pd.DataFrame(rows, columns=RECENT_ORDER_COLUMNS)


def compute_status_histogram(orders: pd.DataFrame) -> dict[str, int]:
    """Count orders for the four summary statuses.

    Keys are always delivered, processing, pending, cancelled (in that
    order); other statuses are not represented.
    """
    counts = orders["status"].value_counts()
    return {status: int(counts.get(status, 0)) for status in HISTOGRAM_STATUSES}


def compute_revenue_trend(orders: pd.DataFrame) -> pd.DataFrame:
    """Revenue per abbreviated month label.

    Labels ignore the year, so the same month of different years shares
    one bucket. Label order is first occurrence in ``orders``. Orders
    without a timestamp are left out.

    Returns
    -------
    DataFrame with columns: month, revenue
    """
    dated = orders[orders["created_at"].notna()]
    undated = len(orders) - len(dated)
    if undated:
        logger.warning("%d orders without createdAt left out of the revenue trend", undated)

    if dated.empty:
        return pd.DataFrame({
            "month": pd.Series(dtype="object"),
            "revenue": pd.Series(dtype="float64"),
        })

    labels = dated["created_at"].dt.strftime("%b").rename("month")
    trend = _amounts(dated).groupby(labels, sort=False).sum()
    return trend.rename("revenue").reset_index()[REVENUE_TREND_COLUMNS]


def compute_top_products(
    orders: pd.DataFrame,
    products: pd.DataFrame,
    limit: int = TOP_PRODUCTS_LIMIT,
) -> pd.DataFrame:
    """Best-selling products by quantity across all order line items.

    Ties keep the order in which products were first seen. Products
    missing from ``products`` are named "Unknown Product" with revenue 0.

    Returns
    -------
    DataFrame with columns: product_id, name, quantity, revenue
    """
    items = build_fact_order_items(orders)

    # product_id -> accumulated quantity, in first-seen order
    quantities: dict = {}
    for product_id, quantity in zip(items["product_id"], items["quantity"]):
        quantities[product_id] = quantities.get(product_id, 0) + int(quantity)

    # sorted() is stable with reverse=True, so ties stay in first-seen order
    ranked = sorted(quantities.items(), key=lambda kv: kv[1], reverse=True)[:max(limit, 0)]

    catalog: dict = {}
    for product_id, name, price in zip(products["product_id"], products["name"], products["price"]):
        catalog.setdefault(product_id, (name, price))

    rows = []
    for product_id, quantity in ranked:
        name, price = catalog.get(product_id, (None, None))
        if product_id is None or product_id not in catalog:
            logger.warning("Product %s not found in catalog", product_id)
        revenue = 0.0 if price is None or pd.isna(price) else float(price) * quantity
        rows.append({
            "product_id": product_id,
            "name": display_or_fallback(name, FALLBACK_PRODUCT_NAME),
            "quantity": quantity,
            "revenue": revenue,
        })

    return pd.DataFrame(rows, columns=TOP_PRODUCT_COLUMNS)
