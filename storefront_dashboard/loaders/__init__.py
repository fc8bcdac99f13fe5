"""Data ingestion from the storefront admin API."""

from .api_client import StorefrontApiClient
from .utils import normalise_date, ref_field, ref_id, safe_float, safe_int

__all__ = [
    "StorefrontApiClient",
    "normalise_date",
    "ref_field",
    "ref_id",
    "safe_float",
    "safe_int",
]
