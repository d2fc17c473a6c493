"""Tag model for the canonical tag and category vocabulary."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from portfolio.db.base import Base
from portfolio.db.models.enums import TagKind

TAG_NAME_MIN_LENGTH = 2
TAG_NAME_MAX_LENGTH = 50
TAG_DESCRIPTION_MAX_LENGTH = 280


class Tag(Base):
    """A canonical tag or category.

    Tags and categories share one table so that a name is unique across
    both kinds. ``usage_count`` is an approximate popularity counter: it is
    incremented once per project that references the tag and never
    decremented.
    """

    __tablename__ = "tags"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # Tag data
    name: Mapped[str] = mapped_column(
        String(TAG_NAME_MAX_LENGTH), unique=True, nullable=False
    )
    description: Mapped[str | None] = mapped_column(
        String(TAG_DESCRIPTION_MAX_LENGTH), nullable=True
    )
    kind: Mapped[TagKind] = mapped_column(
        Enum(TagKind), default=TagKind.TAG, nullable=False
    )
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps (created_at is never updated)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("usage_count >= 0", name="usage_count_non_negative"),
        # Popularity listing per kind
        Index("ix_tags_kind_usage_count", "kind", "usage_count"),
    )

    def __repr__(self) -> str:
        return f"<Tag {self.kind.value}:{self.name} ({self.usage_count})>"
