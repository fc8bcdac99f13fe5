import pandas as pd

from storefront_dashboard.transforms import (
    CUSTOMER_COLUMNS,
    ORDER_COLUMNS,
    ORDER_ITEM_COLUMNS,
    PRODUCT_COLUMNS,
    build_dim_customer,
    build_dim_product,
    build_fact_order_items,
    build_fact_orders,
)


def test_empty_inputs_keep_schema():
    orders = build_fact_orders([])
    assert list(orders.columns) == ORDER_COLUMNS
    assert pd.api.types.is_datetime64_any_dtype(orders["created_at"])
    assert list(build_fact_order_items(orders).columns) == ORDER_ITEM_COLUMNS
    assert list(build_dim_product([]).columns) == PRODUCT_COLUMNS
    assert list(build_dim_customer([]).columns) == CUSTOMER_COLUMNS


class TestBuildFactOrders:

    def test_populated_order(self):
        raw = [{
            "_id": "o1",
            "createdAt": "2024-03-02T09:30:00.000Z",
            "totalAmount": "1250.50",
            "status": "confirmed",
            "user": {"_id": "u1", "name": "Meera Iyer", "email": "meera@example.com", "phone": "9876543210"},
            "paymentStatus": "paid",
            "deliveryDate": "2024-03-05T00:00:00.000Z",
            "deliveryTime": "10:00 AM - 1:00 PM",
            "deliveryAddress": {"street": "12 Market Road", "city": "Pune"},
            "items": [{"product": {"_id": "p1", "name": "Bamboo Trophy", "price": 599}, "quantity": 2}],
        }]
        order = build_fact_orders(raw).iloc[0]

        assert order["order_id"] == "o1"
        assert order["created_at"] == pd.Timestamp("2024-03-02 09:30")
        assert order["total_amount"] == 1250.5
        assert order["customer_id"] == "u1"
        assert order["customer_name"] == "Meera Iyer"
        assert order["delivery_date"] == pd.Timestamp("2024-03-05")
        assert order["delivery_address"] == {"street": "12 Market Road", "city": "Pune"}
        assert order["items"] == [
            {"product_id": "p1", "product_name": "Bamboo Trophy", "quantity": 2, "unit_price": 599.0},
        ]

    def test_unpopulated_user_reference(self):
        order = build_fact_orders([{"_id": "o1", "totalAmount": 10, "user": "u9"}]).iloc[0]
        assert order["customer_id"] == "u9"
        assert order["customer_name"] is None

    def test_missing_fields_use_fallbacks(self):
        order = build_fact_orders([{"_id": "o1"}]).iloc[0]
        assert order["total_amount"] == 0.0
        assert pd.isna(order["created_at"])
        assert order["customer_id"] is None
        assert order["items"] == []

    def test_malformed_records_skipped(self):
        orders = build_fact_orders([None, "bad", {"_id": "ok", "totalAmount": 1, "items": ["junk"]}])
        assert orders["order_id"].tolist() == ["ok"]
        assert orders.iloc[0]["items"] == []

    def test_item_price_wins_over_product_price(self):
        raw = [{
            "_id": "o1",
            "items": [
                {"product": {"_id": "p1", "price": 40}, "quantity": 1, "price": 35},
                {"product": {"_id": "p2", "price": 40}, "quantity": 1},
                {"product": "p3", "quantity": "2"},
            ],
        }]
        items = build_fact_orders(raw).iloc[0]["items"]
        assert [item["unit_price"] for item in items] == [35.0, 40.0, None]
        assert items[2]["product_id"] == "p3"
        assert items[2]["quantity"] == 2


def test_build_fact_order_items():
    raw = [
        {"_id": "o1", "items": [
            {"product": {"_id": "p1", "name": "Tray"}, "quantity": 2, "price": 100},
            {"product": {"_id": "p2", "name": "Mask"}, "quantity": 1},
        ]},
        {"_id": "o2", "items": [{"product": {"_id": "p1", "name": "Tray"}, "quantity": 3, "price": 100}]},
    ]
    items = build_fact_order_items(build_fact_orders(raw))

    assert items["order_id"].tolist() == ["o1", "o1", "o2"]
    assert items["product_id"].tolist() == ["p1", "p2", "p1"]
    assert items["quantity"].tolist() == [2, 1, 3]
    assert items.loc[0, "line_total"] == 200.0
    assert pd.isna(items.loc[1, "line_total"])


class TestBuildDimProduct:

    def test_fields_and_defaults(self):
        raw = [{
            "_id": "p1",
            "name": "Bamboo Ganesha",
            "price": 999,
            "category": "Bamboo Ganesha",
            "stock": "12",
            "images": ["a.jpg", "b.jpg"],
            "discountStartDate": "2024-03-01",
        }]
        product = build_dim_product(raw).iloc[0]

        assert product["price"] == 999.0
        assert product["stock"] == 12
        assert product["discount"] == 0.0
        assert not product["is_discount_active"]
        assert product["discount_start"] == pd.Timestamp("2024-03-01")
        assert pd.isna(product["offer_price"])
        assert product["image_count"] == 2

    def test_products_without_id_dropped(self):
        products = build_dim_product([{"name": "orphan", "price": 1}, {"id": "p2", "name": "kept"}])
        assert products["product_id"].tolist() == ["p2"]


def test_build_dim_customer_keeps_all_roles(users):
    customers = build_dim_customer(users)
    assert customers["user_id"].tolist() == ["u1", "u2", "u3", "u4"]
    assert customers["role"].iloc[:3].tolist() == ["user", "user", "admin"]
    assert pd.isna(customers["role"].iloc[3])
