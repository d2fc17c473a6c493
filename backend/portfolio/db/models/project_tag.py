"""ProjectTag model holding the denormalized tag values of a project."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio.db.base import Base
from portfolio.db.models.tag import TAG_NAME_MAX_LENGTH

if TYPE_CHECKING:
    from portfolio.db.models.project import Project


class ProjectTag(Base):
    """A normalized tag string carried by a project.

    This is a value, not a reference into the tags table.
    """

    __tablename__ = "project_tags"

    # Composite primary key: a project carries each tag once
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), primary_key=True)

    position: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    project: Mapped[Project] = relationship("Project", back_populates="tag_links")

    # Indexes
    __table_args__ = (
        # Tag filters and facet grouping
        Index("ix_project_tags_name", "name"),
    )
