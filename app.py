"""
Storefront Admin Dashboard — Interactive Dashboard

Run with:  streamlit run app.py
"""

import sys
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go
import plotly.express as px
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent))

from storefront_dashboard.config import (
    CURRENCY_SYMBOL,
    ORDER_STATUS_REGISTRY,
    PRODUCT_CATEGORIES,
    SELECTABLE_STATUSES,
    get_api_settings,
)
from storefront_dashboard.catalog import (
    build_product_payload,
    calculate_discount,
    calculate_discounted_price,
    format_dimensions,
    is_discount_live,
    product_form_defaults,
    validate_product_images,
)
from storefront_dashboard.dashboard import get_status_chart_data
from storefront_dashboard.exceptions import DashboardError
from storefront_dashboard.formatting import format_change, format_currency, format_order_date, short_order_id
from storefront_dashboard.loaders import StorefrontApiClient
from storefront_dashboard.orders import (
    can_change_status,
    change_order_status,
    get_order_detail,
    get_status_color,
    get_status_label,
)
from storefront_dashboard.refresh import DashboardRefresher
from storefront_dashboard import simulator
from storefront_dashboard.transforms import build_dim_customer, build_dim_product, build_fact_orders

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Storefront Admin Dashboard",
    page_icon="🛍️",
    layout="wide",
    initial_sidebar_state="expanded",
)

SIMULATED_REFERENCE_DATE = pd.Timestamp("2024-06-28 12:00")
SETTINGS = get_api_settings()


# ---------------------------------------------------------------------------
# Data loading (cached)
# ---------------------------------------------------------------------------
def fetch_records(source: str):
    if source == "api":
        return get_client().fetch_all()
    return simulator.generate_store(SIMULATED_REFERENCE_DATE)


@st.cache_resource
def get_client():
    return StorefrontApiClient(SETTINGS["base_url"], SETTINGS["token"], SETTINGS["timeout"])


@st.cache_resource
def get_refresher(source: str):
    if source == "api":
        return DashboardRefresher(lambda: fetch_records("api"))
    return DashboardRefresher(
        lambda: fetch_records("simulated"),
        clock=lambda: SIMULATED_REFERENCE_DATE,
    )


@st.cache_data(ttl=SETTINGS["refresh_seconds"])
def load_tables(source: str):
    orders, products, users = fetch_records(source)
    return {
        "orders": build_fact_orders(orders),
        "products": build_dim_product(products),
        "customers": build_dim_customer(users),
    }


def load_tables_or_stop(source: str):
    try:
        return load_tables(source)
    except DashboardError as exc:
        st.error("Failed to load dashboard data")
        st.caption(str(exc))
        st.stop()


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Storefront Admin")
st.sidebar.markdown("Orders, catalog and sales overview")
st.sidebar.divider()

source_label = st.sidebar.radio("Data source", ["Simulated", "Admin API"])
source = "api" if source_label == "Admin API" else "simulated"

page = st.sidebar.radio("Navigate", ["Dashboard", "Orders", "Products"])

st.sidebar.divider()
st.sidebar.caption(f"Auto-refresh every {SETTINGS['refresh_seconds']}s")


# ---------------------------------------------------------------------------
# Helper: stat card
# ---------------------------------------------------------------------------
def stat_card(label: str, value: str, footnote: str = "", color: str = "#16a34a"):
    st.markdown(
        f"""
        <div style="background: {color}11; border: 1px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; margin: 4px 0;">{value}</div>
            <div style="font-size: 13px; color: {color};">{footnote}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


# ===========================================================================
# PAGE: Dashboard
# ===========================================================================
# Each run of the fragment takes a fresh refresh through the refresher, on the
# timer and on the button alike
@st.fragment(run_every=SETTINGS["refresh_seconds"])
def dashboard_page(source: str):
    header, button = st.columns([4, 1])
    header.title("Dashboard Overview")
    manual = button.button("Refresh Data", key="refresh_dashboard", use_container_width=True)

    refresher = get_refresher(source)
    try:
        refresher.refresh()
        if manual:
            st.toast("Dashboard data refreshed successfully!")
    except DashboardError as exc:
        if manual:
            st.toast("Failed to refresh dashboard data")
        if refresher.latest is None:
            st.error("Failed to load dashboard data")
            st.caption(str(exc))
            return
        st.caption(f"Showing the last successful refresh: {exc}")

    overview = refresher.latest

    summary = overview["summary"]
    change_color = "#16a34a" if summary["revenue_change"] >= 0 else "#dc2626"

    cols = st.columns(4)
    with cols[0]:
        stat_card("Total Orders", f"{summary['total_orders']:,}", f"{summary['completed_orders']} completed")
    with cols[1]:
        stat_card(
            "Total Revenue",
            format_currency(summary["total_revenue"]),
            f"{format_change(summary['revenue_change'])} vs last month",
            change_color,
        )
    with cols[2]:
        stat_card("Total Products", f"{summary['total_products']:,}")
    with cols[3]:
        stat_card("Total Customers", f"{summary['total_customers']:,}",
                  f"Avg order {format_currency(summary['average_order_value'])}")

    st.divider()

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Revenue Trend")
        trend = overview["revenue_trend"]
        if trend.empty:
            st.info("No orders yet.")
        else:
            fig = go.Figure(go.Scatter(
                x=trend["month"],
                y=trend["revenue"],
                name="Revenue",
                mode="lines+markers",
                line=dict(color="rgb(22, 163, 74)", width=2, shape="spline"),
                fill="tozeroy",
                fillcolor="rgba(22, 163, 74, 0.2)",
            ))
            fig.update_layout(
                height=350,
                yaxis_title=f"Revenue ({CURRENCY_SYMBOL})",
                plot_bgcolor="rgba(0,0,0,0)",
                margin=dict(l=10, r=10, t=10, b=40),
            )
            fig.update_yaxes(rangemode="tozero")
            st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.subheader("Order Status Distribution")
        status_df = get_status_chart_data(overview["status_histogram"])
        fig = px.pie(
            status_df,
            names="label",
            values="count",
            color="status",
            color_discrete_map={s: ORDER_STATUS_REGISTRY[s]["color"] for s in status_df["status"]},
        )
        fig.update_layout(height=350, margin=dict(l=10, r=10, t=10, b=10))
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Recent Orders")
    recent = overview["recent_orders"]
    if recent.empty:
        st.info("No orders found")
    else:
        display_df = recent.copy()
        display_df["order"] = "#" + display_df["short_id"]
        display_df["amount"] = display_df["amount"].apply(format_currency)
        display_df["status"] = display_df["status"].apply(get_status_label)
        st.dataframe(display_df[["order", "customer", "amount", "status", "date"]],
                     use_container_width=True, hide_index=True)

    st.subheader("Top Products")
    top = overview["top_products"]
    if not top.empty:
        fig = go.Figure(go.Bar(
            x=top["quantity"],
            y=top["name"],
            orientation="h",
            marker_color="#16a34a",
            text=top["revenue"].apply(format_currency),
            textposition="outside",
        ))
        fig.update_layout(
            height=300,
            xaxis_title="Units sold",
            yaxis=dict(autorange="reversed"),
            plot_bgcolor="rgba(0,0,0,0)",
            margin=dict(l=10, r=10, t=10, b=40),
        )
        st.plotly_chart(fig, use_container_width=True)


if page == "Dashboard":
    dashboard_page(source)


# ===========================================================================
# PAGE: Orders
# ===========================================================================
elif page == "Orders":
    st.title("Orders")

    orders = load_tables_or_stop(source)["orders"]
    if orders.empty:
        st.warning("No orders found")
    else:
        table = pd.DataFrame({
            "order": orders["order_id"].apply(lambda oid: f"#{short_order_id(oid)}"),
            "customer": orders["customer_name"].fillna("N/A"),
            "amount": orders["total_amount"].apply(format_currency),
            "status": orders["status"].apply(get_status_label),
            "date": orders["created_at"].apply(format_order_date),
        })
        st.dataframe(table, use_container_width=True, hide_index=True)

        st.divider()
        selected = st.selectbox(
            "Order details",
            orders["order_id"].tolist(),
            format_func=lambda oid: f"#{short_order_id(oid)}",
        )
        detail = get_order_detail(orders, selected)
        color = get_status_color(detail["status"])

        col1, col2 = st.columns(2)
        with col1:
            st.markdown(f"**Customer:** {detail['customer']}")
            st.markdown(f"**Email:** {detail['email']}")
            st.markdown(f"**Phone:** {detail['phone']}")
            st.markdown(f"**Order Date:** {detail['order_date']}")
            st.markdown(f"**Delivery:** {detail['delivery_date']} {detail['delivery_time']}")
        with col2:
            st.markdown(
                f"**Status:** <span style='color:{color}; font-weight:600;'>{detail['status_label']}</span>",
                unsafe_allow_html=True,
            )
            st.markdown(f"**Payment:** {detail['payment']}")
            st.markdown(f"**Address:** {detail['address']}")
            if detail["notes"]:
                st.info(detail["notes"])

        items_df = pd.DataFrame(detail["items"], columns=["product", "quantity", "price", "total"])
        st.dataframe(items_df, use_container_width=True, hide_index=True)
        st.markdown(f"**Total:** {format_currency(detail['total_amount'])}")

        if source == "api" and can_change_status(detail["status"]):
            new_status = st.selectbox("Change status", SELECTABLE_STATUSES, format_func=get_status_label)
            if st.button("Update status"):
                try:
                    change_order_status(get_client(), orders, selected, new_status)
                    load_tables.clear()
                    st.toast(f"Order status updated to {new_status}")
                    st.rerun()
                except DashboardError as exc:
                    st.error(f"Failed to update order status: {exc}")


# ===========================================================================
# PAGE: Products
# ===========================================================================
elif page == "Products":
    st.title("Products")

    products = load_tables_or_stop(source)["products"]
    if products.empty:
        st.warning("No products found")
    else:
        today = SIMULATED_REFERENCE_DATE if source == "simulated" else pd.Timestamp.now()
        table = pd.DataFrame({
            "name": products["name"],
            "category": products["category"],
            "price": products["price"].apply(format_currency),
            "offer": [
                f"{calculate_discount(p, o)}% OFF" if active else ""
                for p, o, active in zip(products["price"], products["offer_price"], products["is_offer_active"])
            ],
            "sale price": [
                format_currency(calculate_discounted_price(row["price"], row["discount"]))
                if is_discount_live(row, today) else ""
                for _, row in products.iterrows()
            ],
            "stock": products["stock"],
            "dimensions": [format_dimensions(row) for _, row in products.iterrows()],
            "images": products["image_count"],
        })
        st.dataframe(table, use_container_width=True, hide_index=True)

        if source == "api":
            st.divider()
            to_delete = st.selectbox(
                "Delete product",
                products["product_id"].tolist(),
                format_func=lambda pid: products.loc[products["product_id"] == pid, "name"].iloc[0],
            )
            if st.button("Delete"):
                try:
                    get_client().delete_product(to_delete)
                    load_tables.clear()
                    st.toast("Product deleted successfully")
                    st.rerun()
                except DashboardError as exc:
                    st.error(f"Failed to delete product: {exc}")

            st.divider()
            st.subheader("Edit Product")
            to_edit = st.selectbox(
                "Product",
                products["product_id"].tolist(),
                format_func=lambda pid: products.loc[products["product_id"] == pid, "name"].iloc[0],
                key="edit_product_id",
            )
            current = product_form_defaults(products[products["product_id"] == to_edit].iloc[0])
            with st.form("edit_product"):
                form = {
                    **current,
                    "name": st.text_input("Name", value=current["name"], key=f"edit_name_{to_edit}"),
                    "price": st.number_input(
                        "Price", min_value=0.0, step=1.0,
                        value=float(current["price"] or 0), key=f"edit_price_{to_edit}",
                    ),
                    "category": st.text_input("Category", value=current["category"], key=f"edit_category_{to_edit}"),
                    "stock": st.number_input(
                        "Stock", min_value=0, step=1,
                        value=int(current["stock"] or 0), key=f"edit_stock_{to_edit}",
                    ),
                    "discount": st.number_input(
                        "Discount (%)", min_value=0.0, max_value=100.0, step=1.0,
                        value=float(current["discount"] or 0), key=f"edit_discount_{to_edit}",
                    ),
                }
                if st.form_submit_button("Update"):
                    try:
                        get_client().update_product(to_edit, build_product_payload(form))
                        load_tables.clear()
                        st.toast("Product updated successfully")
                        st.rerun()
                    except DashboardError as exc:
                        st.error(f"Failed to update product: {exc}")

            st.divider()
            st.subheader("Add Product")
            with st.form("add_product", clear_on_submit=True):
                form = {
                    "name": st.text_input("Name"),
                    "description": st.text_area("Description"),
                    "price": st.number_input("Price", min_value=0.0, step=1.0),
                    "category": st.selectbox("Category", PRODUCT_CATEGORIES),
                    "stock": st.number_input("Stock", min_value=0, step=1),
                    "discount": st.number_input("Discount (%)", min_value=0.0, max_value=100.0, step=1.0),
                }
                images = st.file_uploader(
                    "Images", type=["jpg", "jpeg", "png", "webp"], accept_multiple_files=True
                )
                if st.form_submit_button("Save"):
                    try:
                        validate_product_images([], [{"name": f.name, "size": f.size} for f in images or []])
                        get_client().create_product(build_product_payload(form))
                        load_tables.clear()
                        st.toast("Product added successfully")
                        st.rerun()
                    except DashboardError as exc:
                        st.error(f"Failed to save product: {exc}")
