from typing import Any, Optional


class StockDashboardError(RuntimeError):
    pass


class ConfigurationError(StockDashboardError):
    pass


class ValidationError(StockDashboardError):
    """Bad operator input. Raised before any request is issued."""


class TransportError(StockDashboardError):
    """The vendor API (or the gateway) could not be reached."""


class DomainError(StockDashboardError):
    """A remote API answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class EditInProgressError(StockDashboardError):
    pass
