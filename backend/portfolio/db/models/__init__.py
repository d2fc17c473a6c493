"""Database models for the portfolio API."""

from portfolio.db.models.enums import TagKind
from portfolio.db.models.project import Project
from portfolio.db.models.project_category import ProjectCategory
from portfolio.db.models.project_tag import ProjectTag
from portfolio.db.models.tag import Tag

__all__ = [
    # Models
    "Project",
    "ProjectCategory",
    "ProjectTag",
    "Tag",
    # Enums
    "TagKind",
]
