"""Exception classes for the storefront dashboard."""


class DashboardError(Exception):
    """Base exception for the storefront dashboard."""


class ConfigError(DashboardError):
    """Invalid configuration or environment settings."""


class ApiError(DashboardError):
    """Admin API request failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(DashboardError):
    """Rejected order, product or image input."""
