"""Utility functions for the portfolio API."""

from portfolio.utils.slug import next_free_slug, slugify

__all__ = ["next_free_slug", "slugify"]
