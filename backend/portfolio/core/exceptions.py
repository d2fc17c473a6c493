"""Domain exceptions shared by the services and the API layer."""

from __future__ import annotations

from typing import Any


class PortfolioError(Exception):
    """Base exception for portfolio service errors."""

    status_code = 500

    def __init__(self, message: str, code: str = "PORTFOLIO_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_detail(self) -> dict[str, Any]:
        """Render the error as an API error detail payload."""
        return {"message": self.message, "code": self.code}


class InvalidInputError(PortfolioError):
    """Raised when a required field is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "INVALID_INPUT")
        self.field = field

    def to_detail(self) -> dict[str, Any]:
        detail = super().to_detail()
        if self.field:
            detail["field"] = self.field
        return detail


class ConflictError(PortfolioError):
    """Raised when a write collides with an existing unique value."""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class NotFoundError(PortfolioError):
    """Raised when a referenced record does not exist."""

    status_code = 404

    def __init__(self, message: str):
        super().__init__(message, "NOT_FOUND")


class StoreUnavailableError(PortfolioError):
    """Raised when the datastore cannot be reached or a query fails.

    Safe to retry with backoff. Project creation should be retried as a
    whole rather than resumed.
    """

    status_code = 503

    def __init__(self, message: str = "Datastore unavailable"):
        super().__init__(message, "STORE_UNAVAILABLE")
