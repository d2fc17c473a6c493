"""Pydantic schemas for Search API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from portfolio.schemas.common import CamelModel
from portfolio.schemas.project import ProjectResponse


class TagFacetResponse(BaseModel):
    """Tag facet: tag value and matched-project count."""

    model_config = {"populate_by_name": True}

    id: str = Field(alias="_id")
    count: int


class CategoryFacetResponse(BaseModel):
    """Category facet: category id, name and matched-project count."""

    model_config = {"populate_by_name": True}

    id: str = Field(alias="_id")
    name: str
    count: int


class SearchResponse(CamelModel):
    """Paginated search results with facets over all matches."""

    projects: list[ProjectResponse]
    total_pages: int
    total_count: int
    tag_facets: list[TagFacetResponse]
    category_facets: list[CategoryFacetResponse]
