"""Translation of domain errors into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException

from portfolio.core.exceptions import PortfolioError


def http_error(exc: PortfolioError) -> HTTPException:
    """Build the HTTPException for a domain error.

    The detail carries the message, a machine-readable code and, for
    validation errors, the offending field.
    """
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())
