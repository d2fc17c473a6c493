"""Project search endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.api.errors import http_error
from portfolio.core.config import settings
from portfolio.core.exceptions import PortfolioError
from portfolio.db import get_db
from portfolio.schemas.project import ProjectResponse
from portfolio.schemas.search import (
    CategoryFacetResponse,
    SearchResponse,
    TagFacetResponse,
)
from portfolio.services.query_builder import SearchRequest
from portfolio.services.search import SearchExecutor

router = APIRouter(prefix="/search", tags=["search"])


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated query parameter, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@router.get("", response_model=SearchResponse)
async def search_projects(
    q: str = Query("", description="Free-text query (typo tolerant); empty browses all"),
    tags: str | None = Query(None, description="Comma-separated tags; all must match"),
    categories: str | None = Query(
        None, description="Comma-separated category IDs; all must match"
    ),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(
        settings.search_default_limit,
        ge=1,
        le=settings.search_max_limit,
        description="Projects per page",
    ),
    db: AsyncSession = Depends(get_db),
) -> SearchResponse:
    """Search projects with pagination and tag/category facets."""
    request = SearchRequest(
        query=q,
        tags=split_csv(tags),
        categories=split_csv(categories),
        page=page,
        limit=limit,
    )

    try:
        result = await SearchExecutor(db).search(request)
    except PortfolioError as e:
        raise http_error(e) from e

    return SearchResponse(
        projects=[ProjectResponse.model_validate(p) for p in result.projects],
        total_pages=result.total_pages,
        total_count=result.total_count,
        tag_facets=[
            TagFacetResponse(id=facet.name, count=facet.count)
            for facet in result.tag_facets
        ],
        category_facets=[
            CategoryFacetResponse(id=facet.id, name=facet.name, count=facet.count)
            for facet in result.category_facets
        ],
    )
