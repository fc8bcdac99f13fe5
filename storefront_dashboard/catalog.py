"""
Product catalog helpers: discount and offer pricing, discount windows,
image selection rules, and the product form payload.
"""

import logging
import re
from typing import Any

import pandas as pd

from .config import (
    DEFAULT_CATEGORY,
    DEFAULT_EXPIRY_DAYS,
    MAX_IMAGE_BYTES,
    MAX_PRODUCT_IMAGES,
)
from .exceptions import ValidationError
from .loaders.utils import normalise_date, safe_float

logger = logging.getLogger(__name__)

PRODUCT_FORM_FIELDS = [
    "name",
    "description",
    "price",
    "category",
    "stock",
    "length",
    "width",
    "height",
    "discount",
    "discountStartDate",
    "discountEndDate",
    "offerPrice",
    "offerStartDate",
    "offerEndDate",
    "isOfferActive",
]


def calculate_discount(price: float, offer_price: float | None) -> int:
    """Whole-percent saving of ``offer_price`` against ``price``.

    Returns 0 when there is no offer price or the list price is 0.
    """
    price = safe_float(price)
    offer_price = safe_float(offer_price)
    if not offer_price or not price:
        return 0
    return int(round((price - offer_price) / price * 100))


def calculate_discounted_price(price: float, discount: float | None) -> float:
    if not discount:
        return price
    return price - price * discount / 100


def is_discount_live(product: dict | pd.Series, on_date: Any) -> bool:
    """Whether a product's percentage discount applies on ``on_date``.

    The discount must be positive and flagged active; start and end dates
    are optional and inclusive.
    """
    discount = safe_float(product.get("discount"))
    if not discount or discount <= 0:
        return False
    if not bool(product.get("is_discount_active", False)):
        return False

    day = pd.Timestamp(on_date).normalize()
    start = normalise_date(product.get("discount_start"))
    end = normalise_date(product.get("discount_end"))
    if start is not None and day < start.normalize():
        return False
    if end is not None and day > end.normalize():
        return False
    return True


def normalise_category(category: str) -> str:
    """Capitalise each word of a category ("shop all" -> "Shop All")."""
    return re.sub(r"\b\w", lambda m: m.group().upper(), category, flags=re.ASCII)


def format_dimensions(product: dict | pd.Series) -> str:
    dims = [safe_float(product.get(key)) for key in ("length", "width", "height")]
    if any(not d for d in dims):
        return "Dimensions not set"
    return "×".join(f"{d:g}" for d in dims) + " cm"


def _image_key(image: dict) -> str:
    return f"{image['name']}-{image['size']}"


def validate_product_images(existing: list[dict], new: list[dict]) -> list[dict]:
    """Check a new image selection against the product's current images.

    Each image is a dict with ``name`` and ``size`` (bytes). Returns the
    combined list when the selection is accepted.
    """
    if len(existing) + len(new) > MAX_PRODUCT_IMAGES:
        raise ValidationError(f"Maximum {MAX_PRODUCT_IMAGES} images allowed")

    oversized = [image["name"] for image in new if image["size"] > MAX_IMAGE_BYTES]
    if oversized:
        raise ValidationError(
            f"Some images exceed {MAX_IMAGE_BYTES // (1024 * 1024)}MB limit: {', '.join(oversized)}"
        )

    existing_keys = {_image_key(image) for image in existing}
    duplicates = [image["name"] for image in new if _image_key(image) in existing_keys]
    if duplicates:
        raise ValidationError(f"Some images are already added: {', '.join(duplicates)}")

    return [*existing, *new]


def build_product_payload(form: dict) -> dict:
    """Turn product form values into the fields the products API expects.

    Image files are sent separately; only scalar form fields are included.
    """
    name = str(form.get("name") or "").strip()
    if not name:
        raise ValidationError("Product name is required")
    price = safe_float(form.get("price"))
    if price is None or price < 0:
        raise ValidationError("Product price must be a non-negative number")

    discount = safe_float(form.get("discount")) or 0.0

    payload = {}
    for field in PRODUCT_FORM_FIELDS:
        value = form.get(field)
        if value is None or value == "":
            continue
        payload[field] = value

    payload["name"] = name
    payload["price"] = price
    payload["category"] = normalise_category(str(form.get("category") or DEFAULT_CATEGORY))
    payload["discount"] = discount
    payload["isDiscountActive"] = discount > 0
    payload["isAvailable"] = True
    payload["expiryDays"] = DEFAULT_EXPIRY_DAYS

    logger.debug("Built product payload for %s", name)
    return payload


def _form_value(value: Any) -> Any:
    if value is None or value is pd.NaT or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, pd.Timestamp):
        return value.strftime("%Y-%m-%d")
    return value


def product_form_defaults(product: dict | pd.Series) -> dict:
    """Prefill the product form from a dim_product row for editing.

    Missing values become empty strings and dates are shown as YYYY-MM-DD,
    so the result can be passed straight back to build_product_payload.
    """
    columns = {
        "name": "name",
        "price": "price",
        "category": "category",
        "stock": "stock",
        "length": "length",
        "width": "width",
        "height": "height",
        "discount": "discount",
        "discountStartDate": "discount_start",
        "discountEndDate": "discount_end",
        "offerPrice": "offer_price",
        "offerStartDate": "offer_start",
        "offerEndDate": "offer_end",
    }
    form = {field: _form_value(product.get(column)) for field, column in columns.items()}
    form["isOfferActive"] = bool(product.get("is_offer_active", False))
    return form
