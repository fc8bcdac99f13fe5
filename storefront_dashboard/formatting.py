"""Display formatting for order ids, dates and amounts."""

from typing import Any

import pandas as pd

from .config import CURRENCY_SYMBOL, FALLBACK_TEXT, SHORT_ID_LENGTH


def _is_missing(val: Any) -> bool:
    if val is None:
        return True
    try:
        return bool(pd.isna(val))
    except (TypeError, ValueError):
        return False


def short_order_id(order_id: Any) -> str:
    """Last SHORT_ID_LENGTH characters of an order id, for display only."""
    if _is_missing(order_id) or str(order_id) == "":
        return FALLBACK_TEXT
    return str(order_id)[-SHORT_ID_LENGTH:]


def format_order_date(ts: Any) -> str:
    """Format a timestamp as e.g. "Jan 5, 2024"; "N/A" when missing."""
    if _is_missing(ts):
        return FALLBACK_TEXT
    ts = pd.Timestamp(ts)
    return f"{ts:%b} {ts.day}, {ts.year}"


def format_delivery_time(val: Any) -> str:
    if _is_missing(val) or str(val).strip() == "":
        return FALLBACK_TEXT
    return str(val)


def format_currency(amount: Any) -> str:
    if _is_missing(amount):
        amount = 0.0
    amount = float(amount)
    if amount.is_integer():
        return f"{CURRENCY_SYMBOL}{amount:,.0f}"
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def format_change(change: float) -> str:
    """Unsigned one-decimal percentage; the sign is shown by colour."""
    return f"{abs(change):.1f}%"


def display_or_fallback(val: Any, fallback: str = FALLBACK_TEXT) -> str:
    """Return ``val`` as text, or ``fallback`` for missing/empty values."""
    if _is_missing(val) or str(val) == "":
        return fallback
    return str(val)
