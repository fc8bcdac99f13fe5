import json
import threading

import pandas as pd
import pytest

from storefront_dashboard.dashboard import (
    build_overview_from_records,
    get_dashboard_overview,
    get_status_chart_data,
    overview_to_dict,
)
from storefront_dashboard.exceptions import ApiError
from storefront_dashboard.refresh import DashboardRefresher
from storefront_dashboard.transforms import build_dim_customer, build_dim_product, build_fact_orders


@pytest.fixture
def raw_store(make_order, make_item, catalog, users):
    orders = [
        make_order("o1", 100, status="delivered", created_at="2024-02-10T08:00:00.000Z",
                   items=[make_item("A", 3)], user={"_id": "u1", "name": "Meera Iyer"}),
        make_order("o2", 250, status="pending", created_at="2024-03-05T08:00:00.000Z",
                   items=[make_item("B", 1), make_item("A", 1)]),
        make_order("o3", 50, status="cancelled", created_at="2024-03-09T08:00:00.000Z",
                   items=[make_item("C", 2)]),
    ]
    return orders, catalog, users


def test_overview_keys(raw_store, reference_date):
    orders, products, users = raw_store
    overview = get_dashboard_overview(
        build_fact_orders(orders), build_dim_product(products), build_dim_customer(users), reference_date,
    )

    assert list(overview) == [
        "reference_date", "summary", "recent_orders", "status_histogram", "revenue_trend", "top_products",
    ]
    summary = overview["summary"]
    assert summary["total_orders"] == 3
    assert summary["total_revenue"] == 400.0
    assert summary["total_products"] == 3
    assert summary["total_customers"] == 2
    assert summary["current_month_revenue"] == 300.0
    assert summary["last_month_revenue"] == 100.0
    assert summary["revenue_change"] == 200.0
    assert overview["recent_orders"]["order_id"].tolist() == ["o3", "o2", "o1"]
    assert overview["revenue_trend"]["month"].tolist() == ["Feb", "Mar"]
    assert overview["top_products"]["product_id"].tolist() == ["A", "C", "B"]


def test_overview_limits(raw_store, reference_date):
    orders, products, users = raw_store
    overview = get_dashboard_overview(
        build_fact_orders(orders), build_dim_product(products), build_dim_customer(users), reference_date,
        recent_limit=1, top_limit=2,
    )
    assert len(overview["recent_orders"]) == 1
    assert len(overview["top_products"]) == 2


def test_overview_on_empty_store(reference_date):
    overview = build_overview_from_records([], [], [], reference_date)
    assert overview["summary"]["total_orders"] == 0
    assert overview["summary"]["revenue_change"] == 0.0
    assert overview["recent_orders"].empty
    assert overview["revenue_trend"].empty
    assert overview["top_products"].empty
    assert overview["status_histogram"] == {"delivered": 0, "processing": 0, "pending": 0, "cancelled": 0}


def test_overview_survives_out_of_range_values(make_order, reference_date):
    orders = [
        make_order("o1", 100, created_at=10**15, items=[{"product": {"_id": "A"}, "quantity": "1e400"}]),
        make_order("o2", 50, created_at="2024-03-02T08:00:00.000Z"),
    ]
    overview = build_overview_from_records(orders, [], [], reference_date)

    assert overview["summary"]["total_revenue"] == 150.0
    assert overview["recent_orders"]["order_id"].tolist() == ["o2", "o1"]
    assert overview["recent_orders"]["date"].tolist() == ["Mar 2, 2024", "N/A"]
    assert overview["top_products"]["quantity"].tolist() == [0]


def test_overview_to_dict_is_json_serialisable(raw_store, reference_date):
    overview = build_overview_from_records(*raw_store, reference_date)
    payload = overview_to_dict(overview)

    assert payload["referenceDate"] == "2024-03-15T12:00:00"
    assert payload["statusHistogram"]["cancelled"] == 1
    assert payload["topProducts"][0]["name"] == "Bamboo Peacock"
    json.dumps(payload)


def test_status_chart_data():
    chart = get_status_chart_data({"delivered": 4, "pending": 1})
    assert list(chart.columns) == ["status", "label", "count"]
    assert chart["label"].tolist() == ["Delivered", "Processing", "Pending", "Cancelled"]
    assert chart["count"].tolist() == [4, 0, 1, 0]


class TestDashboardRefresher:

    @pytest.fixture
    def clock(self):
        return lambda: pd.Timestamp("2024-03-15 12:00")

    def test_refresh_sets_latest(self, raw_store, clock):
        refresher = DashboardRefresher(lambda: raw_store, clock=clock)
        assert refresher.latest is None

        overview = refresher.refresh()

        assert overview is refresher.latest
        assert overview["reference_date"] == pd.Timestamp("2024-03-15 12:00")
        assert overview["summary"]["total_orders"] == 3

    def test_stale_completion_dropped(self, clock):
        refresher = DashboardRefresher(lambda: ([], [], []), clock=clock)
        older = refresher.begin()
        newer = refresher.begin()

        assert refresher.complete(newer, {"name": "newer"})
        assert not refresher.complete(older, {"name": "older"})
        assert refresher.latest == {"name": "newer"}

    def test_in_order_completions_accepted(self, clock):
        refresher = DashboardRefresher(lambda: ([], [], []), clock=clock)
        first = refresher.begin()
        second = refresher.begin()

        assert refresher.complete(first, {"name": "first"})
        assert refresher.complete(second, {"name": "second"})
        assert refresher.latest == {"name": "second"}

    def test_fetch_failure_keeps_latest(self, raw_store, clock):
        calls = {"n": 0}

        def fetch():
            calls["n"] += 1
            if calls["n"] > 1:
                raise ApiError("server down", status_code=503)
            return raw_store

        refresher = DashboardRefresher(fetch, clock=clock)
        shown = refresher.refresh()
        with pytest.raises(ApiError):
            refresher.refresh()
        assert refresher.latest is shown

    def test_watch_continues_after_failure(self, raw_store, clock):
        stop = threading.Event()
        updates = []
        calls = {"n": 0}

        def fetch():
            calls["n"] += 1
            if calls["n"] == 1:
                raise ApiError("timeout")
            return raw_store

        def on_update(overview):
            updates.append(overview)
            stop.set()

        refresher = DashboardRefresher(fetch, clock=clock)
        refresher.watch(0, stop, on_update=on_update)

        assert calls["n"] == 2
        assert len(updates) == 1
        assert updates[0]["summary"]["total_orders"] == 3
