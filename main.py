"""
Storefront Admin Dashboard — End-to-end analytics pipeline.

Runs the pipeline from raw admin API records to dashboard-ready outputs
and prints smoke-test summaries. Uses simulated records unless --api is
given.

Usage:
    python main.py
    python main.py --api
    python main.py --api --watch
"""

import argparse
import logging
import sys
import threading
from pathlib import Path

import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from storefront_dashboard.config import get_api_settings
from storefront_dashboard.dashboard import (
    get_dashboard_overview,
    get_status_chart_data,
)
from storefront_dashboard.exceptions import DashboardError
from storefront_dashboard.formatting import format_change, format_currency
from storefront_dashboard.loaders import StorefrontApiClient
from storefront_dashboard.refresh import DashboardRefresher
from storefront_dashboard.simulator import generate_store
from storefront_dashboard.transforms import (
    build_dim_customer,
    build_dim_product,
    build_fact_order_items,
    build_fact_orders,
)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

SIMULATED_REFERENCE_DATE = pd.Timestamp("2024-06-28 12:00")


def print_overview(overview: dict) -> None:
    summary = overview["summary"]
    direction = "up" if summary["revenue_change"] >= 0 else "down"

    print(f"\nReference date: {overview['reference_date']:%Y-%m-%d %H:%M}")
    print(f"  Total orders     : {summary['total_orders']} ({summary['completed_orders']} completed, "
          f"{summary['pending_orders']} pending)")
    print(f"  Total revenue    : {format_currency(summary['total_revenue'])} "
          f"({direction} {format_change(summary['revenue_change'])} vs last month)")
    print(f"  This month       : {format_currency(summary['current_month_revenue'])}")
    print(f"  Last month       : {format_currency(summary['last_month_revenue'])}")
    print(f"  Avg order value  : {format_currency(summary['average_order_value'])}")
    print(f"  Products         : {summary['total_products']}")
    print(f"  Customers        : {summary['total_customers']}")

    print("\nOrder status distribution:")
    print(get_status_chart_data(overview["status_histogram"]).to_string(index=False))

    print("\nRevenue trend:")
    trend = overview["revenue_trend"]
    print(trend.to_string(index=False) if not trend.empty else "  (no dated orders)")

    print("\nRecent orders:")
    recent = overview["recent_orders"]
    if not recent.empty:
        print(recent[["short_id", "customer", "amount", "status", "date"]].to_string(index=False))

    print("\nTop products:")
    top = overview["top_products"]
    if not top.empty:
        print(top.to_string(index=False))


def run_pipeline(use_api: bool) -> None:
    """Run the full analytics pipeline once and print smoke-test outputs."""

    print("=" * 70)
    print("  STOREFRONT ADMIN DASHBOARD")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)

    # ------------------------------------------------------------------
    # 1. Load source records
    # ------------------------------------------------------------------
    print("\n[ 1 ] LOADING SOURCE RECORDS")
    print("-" * 40)

    if use_api:
        raw_orders, raw_products, raw_users = StorefrontApiClient.from_env().fetch_all()
        reference_date = pd.Timestamp.now(tz="UTC")
    else:
        raw_orders, raw_products, raw_users = generate_store(SIMULATED_REFERENCE_DATE)
        reference_date = SIMULATED_REFERENCE_DATE

    print(f"\nOrders: {len(raw_orders)}  Products: {len(raw_products)}  Users: {len(raw_users)}")

    # ------------------------------------------------------------------
    # 2. Build fact & dimension tables
    # ------------------------------------------------------------------
    print("\n[ 2 ] BUILDING FACT & DIMENSION TABLES")
    print("-" * 40)

    fact_orders = build_fact_orders(raw_orders)
    fact_items = build_fact_order_items(fact_orders)
    dim_product = build_dim_product(raw_products)
    dim_customer = build_dim_customer(raw_users)

    print(f"\nfact_orders: {len(fact_orders)} rows")
    if not fact_orders.empty:
        print(fact_orders[["order_id", "created_at", "total_amount", "status"]].head(10).to_string(index=False))
    print(f"\nfact_order_items: {len(fact_items)} rows")
    print(f"dim_product: {len(dim_product)} rows")
    print(f"dim_customer: {len(dim_customer)} rows")

    # ------------------------------------------------------------------
    # 3. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n[ 3 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    overview = get_dashboard_overview(fact_orders, dim_product, dim_customer, reference_date)
    print_overview(overview)

    # ------------------------------------------------------------------
    # 4. Consistency checks
    # ------------------------------------------------------------------
    print("\n[ 4 ] CONSISTENCY CHECKS")
    print("-" * 40)

    summary = overview["summary"]
    check1 = abs(summary["total_revenue"] - fact_orders["total_amount"].sum()) < 1e-6
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] Total revenue matches order totals")

    check2 = sum(overview["status_histogram"].values()) <= summary["total_orders"]
    print(f"  [{'PASS' if check2 else 'FAIL'}] Status histogram within order count")

    check3 = abs(overview["revenue_trend"]["revenue"].sum() - summary["total_revenue"]) < 1e-6 \
        or fact_orders["created_at"].isna().any()
    print(f"  [{'PASS' if check3 else 'FAIL'}] Revenue trend sums to total revenue")

    check4 = len(overview["top_products"]) <= 5
    print(f"  [{'PASS' if check4 else 'FAIL'}] Top products limited to 5 rows")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


def watch() -> None:
    """Refresh from the API at the configured interval until interrupted."""
    settings = get_api_settings()
    client = StorefrontApiClient(settings["base_url"], settings["token"], settings["timeout"])
    refresher = DashboardRefresher(client.fetch_all)
    stop = threading.Event()

    logger.info("Watching %s every %ds", settings["base_url"], settings["refresh_seconds"])
    try:
        refresher.watch(settings["refresh_seconds"], stop, on_update=print_overview)
    except KeyboardInterrupt:
        stop.set()


def main() -> int:
    parser = argparse.ArgumentParser(description="Storefront admin dashboard pipeline")
    parser.add_argument("--api", action="store_true", help="load records from the admin API")
    parser.add_argument("--watch", action="store_true", help="keep refreshing from the admin API")
    args = parser.parse_args()

    try:
        if args.watch:
            watch()
        else:
            run_pipeline(args.api)
    except DashboardError:
        logger.exception("Pipeline failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
