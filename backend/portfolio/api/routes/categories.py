"""Category API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.api.errors import http_error
from portfolio.core.exceptions import PortfolioError
from portfolio.db import get_db
from portfolio.schemas.tag import CategoryCreate, TagResponse
from portfolio.services.tag_ledger import TagLedger

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[TagResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),
) -> list[TagResponse]:
    """List all categories by name."""
    categories = await TagLedger(db).list_categories()
    return [TagResponse.model_validate(c) for c in categories]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    """Create a category."""
    try:
        category = await TagLedger(db).create_category(
            payload.name, payload.description
        )
    except PortfolioError as e:
        await db.rollback()
        raise http_error(e) from e

    await db.commit()
    return TagResponse.model_validate(category)
