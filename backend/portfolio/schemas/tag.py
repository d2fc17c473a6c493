"""Pydantic schemas for Tag and Category API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portfolio.db.models import TagKind
from portfolio.db.models.tag import TAG_DESCRIPTION_MAX_LENGTH, TAG_NAME_MAX_LENGTH
from portfolio.schemas.common import CamelModel


class TagResponse(CamelModel):
    """Canonical tag or category record."""

    id: str
    name: str
    description: Optional[str] = None
    kind: TagKind
    usage_count: int
    created_at: datetime
    updated_at: datetime


class TagSuggestionResponse(BaseModel):
    """Tag value in live use with its project count."""

    name: str
    count: int

    model_config = {"from_attributes": True}


class TextSuggestionRequest(CamelModel):
    """Draft text to derive tag suggestions from."""

    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class CategoryCreate(CamelModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=TAG_DESCRIPTION_MAX_LENGTH)
