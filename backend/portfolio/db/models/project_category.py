"""ProjectCategory model for project-category references."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio.db.base import Base

if TYPE_CHECKING:
    from portfolio.db.models.project import Project
    from portfolio.db.models.tag import Tag


class ProjectCategory(Base):
    """Association between a project and a category record."""

    __tablename__ = "project_categories"

    # Composite primary key via foreign keys
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    position: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    project: Mapped[Project] = relationship("Project", back_populates="category_links")
    category: Mapped[Tag] = relationship("Tag", lazy="selectin")

    # Indexes
    __table_args__ = (
        Index("ix_project_categories_category_id", "category_id"),
    )
