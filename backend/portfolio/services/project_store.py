"""Project store: validated writes, slug assignment and candidate matching."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.core.config import settings
from portfolio.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StoreUnavailableError,
)
from portfolio.core.logging import get_logger
from portfolio.db.models import Project, ProjectCategory, ProjectTag, Tag, TagKind
from portfolio.db.models.project import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    PROJECT_NAME_MAX_LENGTH,
    PROJECT_NAME_MIN_LENGTH,
)
from portfolio.services.query_builder import (
    TEXT_SEARCH_FIELDS,
    FuzzyTextClause,
    MatchAllClause,
    SearchExpression,
    is_valid_id,
)
from portfolio.services.tag_ledger import TagLedger, validate_tag_name
from portfolio.utils.slug import next_free_slug, slugify

logger = get_logger(__name__)

URL_FIELDS = ("live_url", "github_url", "image_url")
MAX_URL_LENGTH = 2048

# API field names used in validation errors
_FIELD_LABELS = {
    "project_name": "projectName",
    "description": "description",
    "live_url": "liveUrl",
    "github_url": "githubUrl",
    "image_url": "imageUrl",
    "tags": "tags",
    "categories": "categories",
}


@dataclass
class ScoredProject:
    """A matched project with its relevance score."""

    project: Project
    score: float


def _sort_timestamp(value: datetime | None) -> float:
    # SQLite hands back naive datetimes; new rows in the session are aware
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def rank_key(scored: ScoredProject) -> tuple[float, float, str]:
    """Sort key for relevance descending, then newest first."""
    return (
        scored.score,
        _sort_timestamp(scored.project.created_at),
        scored.project.id,
    )


def _like_pattern(fragment: str) -> str:
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def text_prefilter(
    clause: FuzzyTextClause | MatchAllClause,
) -> ColumnElement[bool] | None:
    """Build the SQL predicate narrowing candidates for a text clause.

    Rows passing the predicate are a superset of the rows the clause
    scores, so ranking stays in Python. ILIKE on the searched columns is
    served by the trigram indexes on PostgreSQL.

    Returns:
        The predicate, or None when every candidate must be scored.
    """
    fragments = clause.candidate_fragments()
    # SQLite only folds ASCII case in LIKE
    if not fragments or not all(fragment.isascii() for fragment in fragments):
        return None

    columns = [getattr(Project, path) for path in TEXT_SEARCH_FIELDS]
    return or_(
        *(
            column.ilike(_like_pattern(fragment), escape="\\")
            for fragment in fragments
            for column in columns
        )
    )


class ProjectStore:
    """Service for persisting and matching projects.

    Tag strings are normalized and counted in the tag ledger before the
    project row is written; the project keeps its own copy of the values.
    """

    def __init__(self, db: AsyncSession, ledger: TagLedger | None = None):
        """Initialize the project store.

        Args:
            db: The database session.
            ledger: Tag ledger sharing the same session.
        """
        self.db = db
        self.ledger = ledger or TagLedger(db)

    async def create(
        self,
        data: dict[str, Any],
        external_id: str | None = None,
        require_category: bool | None = None,
    ) -> Project:
        """Create a project.

        Args:
            data: Project fields keyed by column name, plus tags and categories.
            external_id: Optional content-store correlation id.
            require_category: Override for the category policy; defaults to
                ``settings.require_category_on_create``.

        Returns:
            The persisted project.

        Raises:
            InvalidInputError: If a field is missing or malformed.
            NotFoundError: If a referenced category does not exist.
            ConflictError: If a tag name is taken by a category, or the slug
                or external id cannot be made unique.
        """
        if require_category is None:
            require_category = settings.require_category_on_create

        cleaned = self._clean_fields(data, partial=False)
        categories = await self._resolve_categories(
            cleaned.get("categories", []), require_category
        )
        tags = cleaned.get("tags", [])
        await self._check_tag_names_free(tags)

        # All tag counters are settled before the project row is written
        for name in tags:
            await self.ledger.upsert_tag_usage(name)

        project = Project(
            id=str(uuid.uuid4()),
            project_name=cleaned["project_name"],
            description=cleaned["description"],
            live_url=cleaned.get("live_url"),
            github_url=cleaned.get("github_url"),
            image_url=cleaned.get("image_url"),
            external_id=external_id,
            tag_links=[
                ProjectTag(name=name, position=position)
                for position, name in enumerate(tags)
            ],
            category_links=[
                ProjectCategory(category_id=category.id, category=category, position=position)
                for position, category in enumerate(categories)
            ],
        )
        await self._save_with_unique_slug(project)

        logger.info(
            "project_created",
            project_id=project.id,
            slug=project.slug,
            tags=tags,
            categories=len(categories),
            external_id=external_id,
        )
        return project

    async def upsert_by_external_id(
        self,
        external_id: str,
        data: dict[str, Any],
    ) -> tuple[Project, bool]:
        """Create or partially update the project synced from an external id.

        Only keys present in ``data`` are replaced on update. Repeating the
        same event is a no-op: tag counters only move for tags the project
        did not already carry.

        Args:
            external_id: Content-store correlation id.
            data: Project fields keyed by column name, plus tags and categories.

        Returns:
            Tuple of (project, created).
        """
        external_id = (external_id or "").strip()
        if not external_id:
            raise InvalidInputError("External id cannot be empty", field="externalId")

        result = await self.db.execute(
            select(Project).where(Project.external_id == external_id)
        )
        project = result.scalar_one_or_none()

        if project is None:
            project = await self.create(
                data,
                external_id=external_id,
                require_category=settings.require_category_on_sync,
            )
            return project, True

        await self._apply_update(project, data)
        return project, False

    async def get_by_slug(self, slug: str) -> Project | None:
        """Get a project by its slug."""
        result = await self.db.execute(
            select(Project).where(Project.slug == slug.strip().lower())
        )
        return result.scalar_one_or_none()

    async def find_matching(
        self,
        expression: SearchExpression,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[ScoredProject]:
        """Find projects matching an expression, ranked.

        Tag and category filters are applied in the query, along with a
        substring prefilter for the text clause; the text clause is then
        scored per candidate. Results are ordered by relevance
        descending, then creation time descending.

        Args:
            expression: The search expression.
            skip: Ranked results to skip.
            limit: Maximum results to return (all when None).

        Returns:
            Ranked matches.

        Raises:
            StoreUnavailableError: If the query fails.
        """
        stmt = select(Project)
        for tag_filter in expression.tag_filters:
            stmt = stmt.where(Project.tag_links.any(ProjectTag.name == tag_filter.name))
        for category_filter in expression.category_filters:
            stmt = stmt.where(
                Project.category_links.any(
                    ProjectCategory.category_id == category_filter.category_id
                )
            )
        prefilter = text_prefilter(expression.text)
        if prefilter is not None:
            stmt = stmt.where(prefilter)

        try:
            result = await self.db.execute(stmt)
            candidates = result.scalars().all()
        except OperationalError as e:
            logger.error("project_match_query_failed", error=str(e))
            raise StoreUnavailableError("Failed to query projects") from e

        matches: list[ScoredProject] = []
        for project in candidates:
            score = expression.text.evaluate(
                {
                    "project_name": project.project_name,
                    "description": project.description,
                }
            )
            if score is not None:
                matches.append(ScoredProject(project=project, score=score))

        matches.sort(key=rank_key, reverse=True)

        if limit is None:
            return matches[skip:]
        return matches[skip:skip + limit]

    async def _apply_update(self, project: Project, data: dict[str, Any]) -> None:
        """Replace the fields present in ``data`` on an existing project."""
        cleaned = self._clean_fields(data, partial=True)

        if "categories" in cleaned:
            categories = await self._resolve_categories(
                cleaned["categories"], settings.require_category_on_sync
            )
        else:
            categories = None

        added_tags: list[str] = []
        if "tags" in cleaned:
            current = set(project.tags)
            added_tags = [name for name in cleaned["tags"] if name not in current]
            await self._check_tag_names_free(added_tags)

        for name in added_tags:
            await self.ledger.upsert_tag_usage(name)

        renamed = (
            "project_name" in cleaned
            and cleaned["project_name"] != project.project_name
        )
        for field_name in ("project_name", "description", *URL_FIELDS):
            if field_name in cleaned:
                setattr(project, field_name, cleaned[field_name])

        if "tags" in cleaned:
            existing_links = {link.name: link for link in project.tag_links}
            links = []
            for position, name in enumerate(cleaned["tags"]):
                link = existing_links.get(name) or ProjectTag(name=name)
                link.position = position
                links.append(link)
            project.tag_links = links

        if categories is not None:
            existing_categories = {link.category_id: link for link in project.category_links}
            category_links = []
            for position, category in enumerate(categories):
                link = existing_categories.get(category.id) or ProjectCategory(
                    category_id=category.id, category=category
                )
                link.position = position
                category_links.append(link)
            project.category_links = category_links

        if renamed:
            await self._save_with_unique_slug(project)
        else:
            await self.db.flush()

        logger.info(
            "project_updated",
            project_id=project.id,
            external_id=project.external_id,
            fields=sorted(cleaned),
            added_tags=added_tags,
            renamed=renamed,
        )

    async def _save_with_unique_slug(self, project: Project) -> None:
        """Assign the first free slug for the project's name and flush it.

        A concurrent writer can claim the same slug between the lookup and
        the insert; the unique index rejects it and the next free suffix is
        tried, up to ``settings.slug_retry_attempts`` times.
        """
        base = slugify(project.project_name)
        is_new = project not in self.db

        if not is_new:
            # Push the other field changes outside the slug savepoint
            await self.db.flush()

        for attempt in range(1, settings.slug_retry_attempts + 1):
            slug = await self._next_slug(base, project.id)
            try:
                async with self.db.begin_nested():
                    project.slug = slug
                    if is_new:
                        self.db.add(project)
            except IntegrityError as e:
                if "slug" not in str(e.orig).lower():
                    raise ConflictError(
                        "Project conflicts with an existing record"
                    ) from e
                logger.warning(
                    "slug_collision_retry",
                    slug=slug,
                    attempt=attempt,
                )
                if not is_new:
                    await self.db.refresh(project)
                continue
            return

        raise ConflictError(f"Could not assign a unique slug for '{base}'")

    async def _next_slug(self, base: str, project_id: str | None) -> str:
        stmt = select(Project.slug).where(
            or_(Project.slug == base, Project.slug.like(f"{base}-%"))
        )
        if project_id:
            stmt = stmt.where(Project.id != project_id)
        result = await self.db.execute(stmt)
        taken = set(result.scalars().all())
        return next_free_slug(base, taken)

    async def _resolve_categories(
        self,
        category_ids: list[str],
        require_category: bool,
    ) -> list[Tag]:
        """Load category records for ids, preserving order."""
        if require_category and not category_ids:
            raise InvalidInputError(
                "At least one category is required for the project",
                field="categories",
            )

        found = await self.ledger.get_categories(category_ids)
        missing = [category_id for category_id in category_ids if category_id not in found]
        if missing:
            raise NotFoundError(f"Category with ID {missing[0]} not found")
        return [found[category_id] for category_id in category_ids]

    async def _check_tag_names_free(self, tags: list[str]) -> None:
        """Reject tags whose names already belong to a category."""
        if not tags:
            return
        result = await self.db.execute(
            select(Tag.name).where(Tag.name.in_(tags), Tag.kind == TagKind.CATEGORY)
        )
        taken = result.scalars().first()
        if taken:
            raise ConflictError(f"'{taken}' is already used as a category name")

    def _clean_fields(self, data: dict[str, Any], partial: bool) -> dict[str, Any]:
        """Validate and normalize project fields.

        Args:
            data: Raw fields.
            partial: When False, name and description are required.

        Returns:
            Normalized values for the keys present in ``data``.
        """
        cleaned: dict[str, Any] = {}

        if not partial or "project_name" in data:
            cleaned["project_name"] = self._clean_text(
                data.get("project_name"),
                "project_name",
                PROJECT_NAME_MIN_LENGTH,
                PROJECT_NAME_MAX_LENGTH,
            )
        if not partial or "description" in data:
            cleaned["description"] = self._clean_text(
                data.get("description"),
                "description",
                DESCRIPTION_MIN_LENGTH,
                DESCRIPTION_MAX_LENGTH,
            )

        for field_name in URL_FIELDS:
            if field_name in data:
                cleaned[field_name] = self._clean_url(data[field_name], field_name)

        if "tags" in data:
            raw_tags = data["tags"] or []
            if isinstance(raw_tags, str):
                raise InvalidInputError("Tags must be a list", field="tags")
            # Empty strings are dropped; duplicates collapse to the first occurrence
            names = [
                validate_tag_name(raw, field="tags")
                for raw in raw_tags
                if raw and raw.strip()
            ]
            cleaned["tags"] = list(dict.fromkeys(names))

        if "categories" in data:
            raw_categories = data["categories"] or []
            if isinstance(raw_categories, str):
                raise InvalidInputError("Categories must be a list", field="categories")
            category_ids: list[str] = []
            for raw in raw_categories:
                category_id = (raw or "").strip().lower()
                if not is_valid_id(category_id):
                    raise InvalidInputError(
                        f"Invalid category ID format: {raw}", field="categories"
                    )
                if category_id not in category_ids:
                    category_ids.append(category_id)
            cleaned["categories"] = category_ids
        elif not partial:
            cleaned["categories"] = []

        return cleaned

    def _clean_text(
        self,
        value: str | None,
        field_name: str,
        min_length: int,
        max_length: int,
    ) -> str:
        label = _FIELD_LABELS[field_name]
        text = value.strip() if value else ""
        if not text:
            raise InvalidInputError(f"{label} is required", field=label)
        if not min_length <= len(text) <= max_length:
            raise InvalidInputError(
                f"{label} must be between {min_length} and {max_length} characters",
                field=label,
            )
        return text

    def _clean_url(self, value: str | None, field_name: str) -> str | None:
        label = _FIELD_LABELS[field_name]
        url = value.strip() if value else ""
        if not url:
            return None
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidInputError(f"{label} must be a valid http(s) URL", field=label)
        if len(url) > MAX_URL_LENGTH:
            raise InvalidInputError(
                f"{label} cannot exceed {MAX_URL_LENGTH} characters", field=label
            )
        return url
