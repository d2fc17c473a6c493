"""Pydantic schemas for Project API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portfolio.db.models.project import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    PROJECT_NAME_MAX_LENGTH,
    PROJECT_NAME_MIN_LENGTH,
)
from portfolio.schemas.common import CamelModel


class CategorySummary(BaseModel):
    """Display-ready category reference."""

    id: str
    name: str

    model_config = {"from_attributes": True}


class ProjectResponse(CamelModel):
    """Schema for a project in API responses."""

    id: str
    project_name: str
    description: str
    live_url: Optional[str] = None
    github_url: Optional[str] = None
    image_url: Optional[str] = None
    tags: list[str] = []
    categories: list[CategorySummary] = []
    slug: str
    external_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectCreate(CamelModel):
    """Schema for submitting a new project."""

    project_name: str = Field(
        ..., min_length=PROJECT_NAME_MIN_LENGTH, max_length=PROJECT_NAME_MAX_LENGTH
    )
    description: str = Field(
        ..., min_length=DESCRIPTION_MIN_LENGTH, max_length=DESCRIPTION_MAX_LENGTH
    )
    live_url: Optional[str] = None
    github_url: Optional[str] = None
    image_url: Optional[str] = None
    tags: list[str] = Field(..., min_length=1, description="At least one tag")
    categories: list[str] = Field(default_factory=list)


class ProjectSync(CamelModel):
    """Schema for a content-store sync event.

    Every field is optional; only the fields sent are replaced on an
    existing project. ``imageUrl`` must already be a public URL.
    """

    project_name: Optional[str] = None
    description: Optional[str] = None
    live_url: Optional[str] = None
    github_url: Optional[str] = None
    image_url: Optional[str] = None
    tags: Optional[list[str]] = None
    categories: Optional[list[str]] = None
