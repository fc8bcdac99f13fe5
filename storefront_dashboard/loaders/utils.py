"""
Shared utilities for API record ingestion: timestamp normalisation,
numeric coercion, reference unwrapping.
"""

import logging
import math
from datetime import date, datetime
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_date(val: Any) -> pd.Timestamp | None:
    """Convert an API timestamp to a timezone-naive UTC pd.Timestamp.

    Accepts ISO-8601 strings (``2024-01-15T10:30:00.000Z``), epoch
    milliseconds, and datetime/date objects. Returns None for missing or
    unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, bool):
        logger.warning("Could not parse date value: %s", val)
        return None
    if isinstance(val, (int, float)):
        if pd.isna(val):
            return None
        try:
            ts = pd.Timestamp(int(val), unit="ms", tz="UTC")
        except (ValueError, OverflowError):
            logger.warning("Could not convert epoch value %s to date", val)
            return None
        return _within_bounds(ts.tz_convert(None), val)
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
    elif not isinstance(val, (pd.Timestamp, datetime, date)):
        logger.warning("Could not parse date value: %s", val)
        return None
    try:
        ts = pd.Timestamp(val)
    except (ValueError, TypeError):
        logger.warning("Could not parse date value: %s", val)
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return _within_bounds(ts, val)


def _within_bounds(ts: pd.Timestamp, val: Any) -> pd.Timestamp | None:
    # Dates outside the nanosecond range cannot be formatted or grouped
    if ts < pd.Timestamp.min or ts > pd.Timestamp.max:
        logger.warning("Date value out of range: %s", val)
        return None
    return ts


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric or non-finite values."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int(val: Any) -> int | None:
    """Coerce a value to int via safe_float; fractional values are truncated."""
    result = safe_float(val)
    if result is None:
        return None
    return int(result)


def ref_id(ref: Any) -> str | None:
    """Return the identifier of an API reference.

    References arrive either populated (``{"_id": "...", "name": ...}``)
    or as a bare id string.
    """
    if ref is None:
        return None
    if isinstance(ref, dict):
        ref = ref.get("_id", ref.get("id"))
        if ref is None:
            return None
    ref = str(ref).strip()
    return ref or None


def ref_field(ref: Any, field: str) -> Any:
    """Return a field from a populated reference, or None for bare ids."""
    if isinstance(ref, dict):
        return ref.get(field)
    return None
