import pandas as pd
import pytest

from storefront_dashboard.transforms import (
    build_dim_customer,
    build_dim_product,
    build_fact_orders,
)


@pytest.fixture
def reference_date():
    """Mid-March 2024: current month March, last month February."""
    return pd.Timestamp("2024-03-15 12:00")


@pytest.fixture
def make_item():
    def _make(product_id, quantity, price=None, name=None):
        item = {"product": {"_id": product_id, "name": name or product_id}, "quantity": quantity}
        if price is not None:
            item["price"] = price
        return item

    return _make


@pytest.fixture
def make_order():
    def _make(order_id, amount, status="pending", created_at="2024-03-01T10:00:00.000Z",
              items=None, user=None):
        order = {
            "_id": order_id,
            "status": status,
            "createdAt": created_at,
            "items": items or [],
            "user": user,
        }
        if amount is not None:
            order["totalAmount"] = amount
        return order

    return _make


@pytest.fixture
def catalog():
    """Raw product records A, B, C priced 10, 20, 30."""
    return [
        {"_id": "A", "name": "Bamboo Peacock", "price": 10},
        {"_id": "B", "name": "Warli House", "price": 20},
        {"_id": "C", "name": "Sanchi Stupa", "price": 30},
    ]


@pytest.fixture
def users():
    return [
        {"_id": "u1", "name": "Meera Iyer", "role": "user"},
        {"_id": "u2", "name": "Kabir Das", "role": "user"},
        {"_id": "u3", "name": "Store Admin", "role": "admin"},
        {"_id": "u4", "name": "No Role"},
    ]


@pytest.fixture
def empty_tables():
    return build_fact_orders([]), build_dim_product([]), build_dim_customer([])
