"""Enum types for database models."""

from __future__ import annotations

import enum


class TagKind(str, enum.Enum):
    """Discriminator for records in the shared tags table."""

    TAG = "tag"
    CATEGORY = "category"
