"""Database package for the portfolio API."""

from portfolio.db.base import Base
from portfolio.db.session import async_session_maker, engine, get_db

__all__ = [
    "Base",
    "async_session_maker",
    "engine",
    "get_db",
]
