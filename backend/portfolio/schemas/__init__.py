"""Pydantic schemas for API request/response validation."""

from portfolio.schemas.health import HealthResponse
from portfolio.schemas.project import (
    CategorySummary,
    ProjectCreate,
    ProjectResponse,
    ProjectSync,
)
from portfolio.schemas.search import (
    CategoryFacetResponse,
    SearchResponse,
    TagFacetResponse,
)
from portfolio.schemas.tag import (
    CategoryCreate,
    TagResponse,
    TagSuggestionResponse,
    TextSuggestionRequest,
)

__all__ = [
    "CategoryCreate",
    "CategoryFacetResponse",
    "CategorySummary",
    "HealthResponse",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectSync",
    "SearchResponse",
    "TagFacetResponse",
    "TagResponse",
    "TagSuggestionResponse",
    "TextSuggestionRequest",
]
