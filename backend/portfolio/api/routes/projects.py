"""Project API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.api.errors import http_error
from portfolio.core.exceptions import PortfolioError
from portfolio.core.logging import get_logger
from portfolio.db import get_db
from portfolio.schemas.project import ProjectCreate, ProjectResponse, ProjectSync
from portfolio.services.project_store import ProjectStore

logger = get_logger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """Create a project.

    Tags are normalized and counted in the tag ledger; the slug is derived
    from the project name and made unique with a numeric suffix.
    """
    store = ProjectStore(db)
    try:
        project = await store.create(payload.model_dump())
    except PortfolioError as e:
        await db.rollback()
        logger.warning("project_create_rejected", code=e.code, error=e.message)
        raise http_error(e) from e

    await db.commit()
    return ProjectResponse.model_validate(project)


@router.put("/external/{external_id}", response_model=ProjectResponse)
async def sync_project(
    external_id: str,
    payload: ProjectSync,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """Create or update the project correlated with a content-store document.

    Only the fields present in the body are replaced on update. Responds
    201 when the project was created and 200 when it was updated.
    """
    store = ProjectStore(db)
    try:
        project, created = await store.upsert_by_external_id(
            external_id, payload.model_dump(exclude_unset=True)
        )
    except PortfolioError as e:
        await db.rollback()
        logger.warning(
            "project_sync_rejected",
            external_id=external_id,
            code=e.code,
            error=e.message,
        )
        raise http_error(e) from e

    await db.commit()
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ProjectResponse.model_validate(project)


@router.get("/{slug}", response_model=ProjectResponse)
async def get_project(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> ProjectResponse:
    """Get a project by slug."""
    project = await ProjectStore(db).get_by_slug(slug)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return ProjectResponse.model_validate(project)
