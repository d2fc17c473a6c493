"""URL slug helpers."""

from __future__ import annotations

import re
import unicodedata

DEFAULT_SLUG = "project"
MAX_SLUG_LENGTH = 100


def slugify(text: str) -> str:
    """Build a URL-safe lowercase slug from arbitrary text.

    Accents are folded to ASCII, every run of other characters becomes a
    single hyphen, and leading/trailing hyphens are dropped.

    Args:
        text: Source text, usually a project name.

    Returns:
        The slug, or DEFAULT_SLUG when nothing usable remains.
    """
    text = unicodedata.normalize("NFKD", text or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    text = text[:MAX_SLUG_LENGTH].rstrip("-")
    return text or DEFAULT_SLUG


def next_free_slug(base: str, taken: set[str]) -> str:
    """Return ``base`` or the first ``base-N`` (N >= 1) not in ``taken``."""
    if base not in taken:
        return base
    counter = 1
    while f"{base}-{counter}" in taken:
        counter += 1
    return f"{base}-{counter}"
