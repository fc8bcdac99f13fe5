from unittest.mock import MagicMock

import pandas as pd
import pytest

from storefront_dashboard.exceptions import ValidationError
from storefront_dashboard.orders import (
    apply_order_update,
    can_change_status,
    cancel_order,
    change_order_status,
    format_address,
    get_order_detail,
    get_status_color,
    get_status_label,
    validate_status_transition,
)
from storefront_dashboard.transforms import build_fact_orders


@pytest.fixture
def orders(make_order, make_item):
    return build_fact_orders([
        make_order("ord-0000aa11", 500, status="pending",
                   items=[make_item("A", 2, price=150, name="Bamboo Peacock"), make_item("B", 1, price=200)],
                   user={"_id": "u1", "name": "Meera Iyer", "email": "meera@example.com"}),
        make_order("ord-0000bb22", 300, status="delivered"),
        make_order("ord-0000cc33", 120, status="confirmed"),
    ])


def test_status_labels_and_colours():
    assert get_status_label("out_for_delivery") == "Out for Delivery"
    assert get_status_label("on_hold") == "on_hold"
    assert get_status_color("cancelled") == "#ef4444"
    assert get_status_color("on_hold") == "#6b7280"


@pytest.mark.parametrize("status,allowed", [
    ("pending", True),
    ("confirmed", True),
    ("out_for_delivery", True),
    ("delivered", False),
    ("cancelled", False),
    ("on_hold", True),
])
def test_can_change_status(status, allowed):
    assert can_change_status(status) is allowed


def test_validate_status_transition():
    validate_status_transition("pending", "confirmed")
    with pytest.raises(ValidationError, match="Unsupported"):
        validate_status_transition("pending", "shipped")
    with pytest.raises(ValidationError, match="cannot change"):
        validate_status_transition("delivered", "pending")


class TestChangeOrderStatus:

    def test_updates_row_from_server_response(self, orders):
        client = MagicMock()
        client.update_order_status.return_value = {
            "_id": "ord-0000cc33",
            "totalAmount": 120,
            "status": "out_for_delivery",
            "createdAt": "2024-03-01T10:00:00.000Z",
        }

        result = change_order_status(client, orders, "ord-0000cc33", "out_for_delivery")

        client.update_order_status.assert_called_once_with("ord-0000cc33", "out_for_delivery")
        assert result["status"].tolist() == ["pending", "delivered", "out_for_delivery"]
        assert list(result.columns) == list(orders.columns)
        # input table untouched
        assert orders["status"].tolist() == ["pending", "delivered", "confirmed"]

    def test_locked_order_not_submitted(self, orders):
        client = MagicMock()
        with pytest.raises(ValidationError):
            change_order_status(client, orders, "ord-0000bb22", "pending")
        client.update_order_status.assert_not_called()

    def test_unknown_order(self, orders):
        with pytest.raises(ValidationError, match="not found"):
            change_order_status(MagicMock(), orders, "missing", "confirmed")

    def test_cancel_order(self, orders):
        client = MagicMock()
        client.update_order_status.return_value = {
            "_id": "ord-0000aa11", "totalAmount": 500, "status": "cancelled",
        }
        result = cancel_order(client, orders, "ord-0000aa11")
        client.update_order_status.assert_called_once_with("ord-0000aa11", "cancelled")
        assert result.iloc[0]["status"] == "cancelled"


def test_apply_update_for_unknown_order_returns_copy(orders):
    result = apply_order_update(orders, {"_id": "elsewhere", "status": "confirmed"})
    assert result["order_id"].tolist() == orders["order_id"].tolist()
    assert result is not orders


def test_format_address():
    address = {"street": "12 Market Road", "city": "Pune", "state": "Maharashtra", "pincode": "411001"}
    assert format_address(address) == "12 Market Road, Pune, Maharashtra - 411001"
    assert format_address({"city": "Pune"}) == "Pune"
    assert format_address({}) == "N/A"
    assert format_address(None) == "N/A"
    assert format_address(float("nan")) == "N/A"


def test_get_order_detail(orders):
    detail = get_order_detail(orders, "ord-0000aa11")

    assert detail["short_id"] == "00aa11"
    assert detail["customer"] == "Meera Iyer"
    assert detail["email"] == "meera@example.com"
    assert detail["phone"] == "N/A"
    assert detail["order_date"] == "Mar 1, 2024"
    assert detail["delivery_date"] == "N/A"
    assert detail["status_label"] == "Pending"
    assert detail["payment"] == "Pending"
    assert detail["notes"] is None
    assert detail["items"] == [
        {"product": "Bamboo Peacock", "quantity": 2, "price": 150.0, "total": 300.0},
        {"product": "B", "quantity": 1, "price": 200.0, "total": 200.0},
    ]
    assert detail["total_amount"] == 500.0


def test_get_order_detail_without_customer(orders):
    detail = get_order_detail(orders, "ord-0000bb22")
    assert detail["customer"] == "N/A"
    assert detail["items"] == []
    assert isinstance(orders.loc[1, "created_at"], pd.Timestamp)
