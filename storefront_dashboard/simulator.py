"""
Simulated admin API records for the storefront dashboard.

Generates orders, products and users in the same JSON shape the admin API
returns, so offline runs exercise the full ingestion path. All values are
synthetic.
"""

import numpy as np
import pandas as pd

from .config import PRODUCT_CATEGORIES

# ---------------------------------------------------------------------------
# Typical catalog parameters (price in rupees)
# ---------------------------------------------------------------------------
_PRODUCTS = [
    ("Sanchi Stupa Replica", "Sanchi Stupa", 1450),
    ("Warli House Wall Art", "Warli House", 899),
    ("Bamboo Tiger", "Tiger Crafting", 1299),
    ("Bamboo Peacock", "Bamboo Peacock", 749),
    ("Miniature Ship", "Miniaure Ship", 1899),
    ("Bamboo Trophy", "Bamboo Trophy", 599),
    ("Bamboo Ganesha", "Bamboo Ganesha", 999),
    ("Bamboo Sword Pair", "Bamboo Swords", 1199),
    ("Tribal Mask", "Tribal Mask -1", 649),
    ("Dry Fruit Tray", "Bamboo Dry Fruit Tray", 549),
    ("Tissue Paper Holder", "Bamboo Tissue Paper Holder", 349),
    ("Mobile Booster", "Bamboo Mobile Booster", 299),
]

_FIRST_NAMES = ["Aarav", "Diya", "Ishaan", "Meera", "Kabir", "Ananya", "Rohan", "Sara", "Vivaan", "Tara"]
_LAST_NAMES = ["Sharma", "Patel", "Iyer", "Reddy", "Gupta", "Nair", "Das", "Khan"]
_CITIES = [("Bhopal", "Madhya Pradesh"), ("Pune", "Maharashtra"), ("Guwahati", "Assam"), ("Jaipur", "Rajasthan")]

# Weighted toward fulfilled orders
_STATUS_WEIGHTS = {
    "delivered": 0.45,
    "pending": 0.15,
    "confirmed": 0.1,
    "preparing": 0.05,
    "out_for_delivery": 0.08,
    "processing": 0.07,
    "cancelled": 0.1,
}


def _object_id(rng: np.random.Generator) -> str:
    return "".join(f"{b:02x}" for b in rng.integers(0, 256, size=12))


def _iso(ts: pd.Timestamp) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def generate_products(rng: np.random.Generator | None = None) -> list[dict]:
    """Generate product records, a few with active discounts or offers."""
    rng = rng or np.random.default_rng(42)
    products = []

    for name, category, price in _PRODUCTS:
        discount = int(rng.choice([0, 0, 0, 10, 15]))
        on_offer = bool(rng.random() < 0.25)
        products.append({
            "_id": _object_id(rng),
            "name": name,
            "description": f"Handcrafted {name.lower()}",
            "price": price,
            "category": category if category in PRODUCT_CATEGORIES else "Shop all",
            "stock": int(rng.integers(0, 60)),
            "length": int(rng.integers(10, 60)),
            "width": int(rng.integers(5, 40)),
            "height": int(rng.integers(5, 50)),
            "images": [f"uploads/{name.lower().replace(' ', '-')}-{i}.jpg" for i in range(int(rng.integers(1, 5)))],
            "discount": discount,
            "isDiscountActive": discount > 0,
            "offerPrice": round(price * 0.8) if on_offer else None,
            "isOfferActive": on_offer,
        })

    return products


def generate_users(
    n_customers: int = 40,
    n_admins: int = 2,
    rng: np.random.Generator | None = None,
) -> list[dict]:
    """Generate user records: shoppers with role "user" plus admins."""
    rng = rng or np.random.default_rng(42)
    users = []

    for i in range(n_customers + n_admins):
        first = str(rng.choice(_FIRST_NAMES))
        last = str(rng.choice(_LAST_NAMES))
        users.append({
            "_id": _object_id(rng),
            "name": f"{first} {last}",
            "email": f"{first.lower()}.{last.lower()}{i}@example.com",
            "phone": f"9{rng.integers(100_000_000, 999_999_999)}",
            "role": "user" if i < n_customers else "admin",
        })

    return users


def generate_orders(
    products: list[dict],
    users: list[dict],
    end_date: str | pd.Timestamp = "2024-06-28",
    n_months: int = 6,
    orders_per_month: int = 25,
    rng: np.random.Generator | None = None,
) -> list[dict]:
    """Generate order records spread over the ``n_months`` ending at ``end_date``.

    About one order in twenty is a guest order without a user reference.
    """
    rng = rng or np.random.default_rng(42)
    end = pd.Timestamp(end_date)
    start = (end - pd.DateOffset(months=n_months - 1)).replace(day=1).normalize()
    span_seconds = max(int((end - start).total_seconds()), 1)

    shoppers = [u for u in users if u.get("role") == "user"]
    statuses = list(_STATUS_WEIGHTS)
    weights = np.array(list(_STATUS_WEIGHTS.values()))
    weights = weights / weights.sum()

    orders = []
    for _ in range(n_months * orders_per_month):
        created = start + pd.Timedelta(seconds=int(rng.integers(0, span_seconds)))
        n_items = int(rng.integers(1, 4))
        picks = rng.choice(len(products), size=n_items, replace=False)

        items = []
        for idx in picks:
            product = products[int(idx)]
            items.append({
                "product": {"_id": product["_id"], "name": product["name"], "price": product["price"]},
                "quantity": int(rng.integers(1, 4)),
                "price": product["price"],
            })
        total = sum(item["quantity"] * item["price"] for item in items)

        user = None
        if shoppers and rng.random() > 0.05:
            shopper = shoppers[int(rng.integers(0, len(shoppers)))]
            user = {k: shopper[k] for k in ("_id", "name", "email", "phone")}

        city, state = _CITIES[int(rng.integers(0, len(_CITIES)))]
        delivery = created + pd.Timedelta(days=int(rng.integers(2, 8)))
        orders.append({
            "_id": _object_id(rng),
            "user": user,
            "items": items,
            "totalAmount": total,
            "status": str(rng.choice(statuses, p=weights)),
            "paymentStatus": "paid" if rng.random() < 0.7 else "pending",
            "deliveryDate": _iso(delivery.normalize()),
            "deliveryTime": str(rng.choice(["10:00 AM - 1:00 PM", "2:00 PM - 6:00 PM"])),
            "deliveryAddress": {
                "street": f"{int(rng.integers(1, 200))} Market Road",
                "city": city,
                "state": state,
                "pincode": str(rng.integers(400_000, 800_000)),
            },
            "createdAt": _iso(created),
        })

    return orders


def generate_store(
    end_date: str | pd.Timestamp = "2024-06-28",
    seed: int = 42,
) -> tuple[list[dict], list[dict], list[dict]]:
    """Generate (orders, products, users) from one seeded generator."""
    rng = np.random.default_rng(seed)
    products = generate_products(rng)
    users = generate_users(rng=rng)
    orders = generate_orders(products, users, end_date=end_date, rng=rng)
    return orders, products, users
