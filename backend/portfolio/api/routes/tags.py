"""Tag API endpoints for canonical tags and suggestions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.api.errors import http_error
from portfolio.core.config import settings
from portfolio.core.exceptions import PortfolioError
from portfolio.db import get_db
from portfolio.schemas.tag import (
    TagResponse,
    TagSuggestionResponse,
    TextSuggestionRequest,
)
from portfolio.services.suggestions import SuggestionEngine

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse])
async def list_tags(
    q: str | None = Query(None, description="Case-insensitive name filter"),
    limit: int = Query(settings.tag_list_default_limit, ge=1, le=50, description="Max results"),
    db: AsyncSession = Depends(get_db),
) -> list[TagResponse]:
    """List canonical tags, most used first."""
    engine = SuggestionEngine(db)
    try:
        tags = await engine.suggest_from_ledger(q, limit)
    except PortfolioError as e:
        raise http_error(e) from e

    return [TagResponse.model_validate(t) for t in tags]


@router.get("/suggestions", response_model=list[TagSuggestionResponse])
async def suggest_tags(
    q: str = Query("", description="Partially typed tag"),
    limit: int = Query(
        settings.suggestion_default_limit, ge=1, le=50, description="Max results"
    ),
    db: AsyncSession = Depends(get_db),
) -> list[TagSuggestionResponse]:
    """Autocomplete tags currently used on projects.

    An empty query returns an empty list.
    """
    engine = SuggestionEngine(db)
    try:
        suggestions = await engine.suggest_from_live_usage(q, limit)
    except PortfolioError as e:
        raise http_error(e) from e

    return [TagSuggestionResponse.model_validate(s) for s in suggestions]


@router.post("/suggestions", response_model=list[str])
async def suggest_tags_from_text(
    payload: TextSuggestionRequest,
    db: AsyncSession = Depends(get_db),
) -> list[str]:
    """Suggest tags for a draft from its most frequent keywords."""
    engine = SuggestionEngine(db)
    try:
        return engine.suggest_from_text(payload.title, payload.body)
    except PortfolioError as e:
        raise http_error(e) from e
