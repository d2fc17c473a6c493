"""Project model for showcased work items."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio.db.base import Base

if TYPE_CHECKING:
    from portfolio.db.models.project_category import ProjectCategory
    from portfolio.db.models.project_tag import ProjectTag
    from portfolio.db.models.tag import Tag

PROJECT_NAME_MIN_LENGTH = 3
PROJECT_NAME_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 1000


class Project(Base):
    """A project shown on the portfolio.

    Tags are stored on the project as normalized values (see ProjectTag),
    so "does this project carry tag X" is always answered from the project
    itself, never from the tag ledger.
    """

    __tablename__ = "projects"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # Content
    project_name: Mapped[str] = mapped_column(
        String(PROJECT_NAME_MAX_LENGTH), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    live_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Identity
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    # Correlation id of the upstream content-store document
    external_id: Mapped[str | None] = mapped_column(
        String(128), unique=True, nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    tag_links: Mapped[list[ProjectTag]] = relationship(
        "ProjectTag",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectTag.position",
        lazy="selectin",
    )
    category_links: Mapped[list[ProjectCategory]] = relationship(
        "ProjectCategory",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectCategory.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_projects_created_at", "created_at"),
    )

    @property
    def tags(self) -> list[str]:
        """Normalized tag values in submission order."""
        return [link.name for link in self.tag_links]

    @property
    def categories(self) -> list[Tag]:
        """Category records referenced by this project."""
        return [link.category for link in self.category_links]

    @property
    def category_ids(self) -> list[str]:
        return [link.category_id for link in self.category_links]

    def __repr__(self) -> str:
        return f"<Project {self.slug}>"
