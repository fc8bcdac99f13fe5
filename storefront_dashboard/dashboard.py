"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end and the
CLI. Each function returns plain dicts or DataFrames suitable for
rendering cards, charts and tables.
"""

import logging
from typing import Any

import pandas as pd

from .config import HISTOGRAM_STATUSES, RECENT_ORDERS_LIMIT, TOP_PRODUCTS_LIMIT
from .metrics import (
    compute_recent_orders,
    compute_revenue_trend,
    compute_status_histogram,
    compute_summary,
    compute_top_products,
    to_reference_timestamp,
)
from .orders import get_status_label
from .transforms import build_dim_customer, build_dim_product, build_fact_orders

logger = logging.getLogger(__name__)


def get_dashboard_overview(
    orders: pd.DataFrame,
    products: pd.DataFrame,
    customers: pd.DataFrame,
    reference_date: Any,
    recent_limit: int = RECENT_ORDERS_LIMIT,
    top_limit: int = TOP_PRODUCTS_LIMIT,
) -> dict:
    """Single entry point a front end calls to populate the dashboard page.

    Parameters
    ----------
    orders : fact_orders DataFrame.
    products : dim_product DataFrame.
    customers : dim_customer DataFrame.
    reference_date : Timestamp treated as "now".

    Returns
    -------
    Dict with keys:
        reference_date, summary, recent_orders, status_histogram,
        revenue_trend, top_products
    """
    overview = {
        "reference_date": to_reference_timestamp(reference_date),
        "summary": compute_summary(orders, products, customers, reference_date),
        "recent_orders": compute_recent_orders(orders, recent_limit),
        "status_histogram": compute_status_histogram(orders),
        "revenue_trend": compute_revenue_trend(orders),
        "top_products": compute_top_products(orders, products, top_limit),
    }

    logger.info(
        "Dashboard overview: %d orders, %d products, %d customers",
        overview["summary"]["total_orders"],
        overview["summary"]["total_products"],
        overview["summary"]["total_customers"],
    )
    return overview


def build_overview_from_records(
    raw_orders: list[dict],
    raw_products: list[dict],
    raw_users: list[dict],
    reference_date: Any,
) -> dict:
    """Run ingestion and aggregation on raw admin API records."""
    return get_dashboard_overview(
        build_fact_orders(raw_orders),
        build_dim_product(raw_products),
        build_dim_customer(raw_users),
        reference_date,
    )


def get_status_chart_data(status_histogram: dict[str, int]) -> pd.DataFrame:
    """Pie chart rows for the status histogram.

    Returns
    -------
    DataFrame with columns: status, label, count
    """
    return pd.DataFrame(
        [
            {
                "status": status,
                "label": get_status_label(status),
                "count": status_histogram.get(status, 0),
            }
            for status in HISTOGRAM_STATUSES
        ],
        columns=["status", "label", "count"],
    )


def overview_to_dict(overview: dict) -> dict:
    """JSON-serialisable copy of a dashboard overview."""
    return {
        "referenceDate": overview["reference_date"].isoformat(),
        "summary": dict(overview["summary"]),
        "recentOrders": overview["recent_orders"].to_dict(orient="records"),
        "statusHistogram": dict(overview["status_histogram"]),
        "revenueTrend": overview["revenue_trend"].to_dict(orient="records"),
        "topProducts": overview["top_products"].to_dict(orient="records"),
    }
