"""Tag ledger for canonical tags, categories and their usage counters."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.core.exceptions import (
    ConflictError,
    InvalidInputError,
    StoreUnavailableError,
)
from portfolio.core.logging import get_logger
from portfolio.db.models import Tag, TagKind
from portfolio.db.models.tag import (
    TAG_DESCRIPTION_MAX_LENGTH,
    TAG_NAME_MAX_LENGTH,
    TAG_NAME_MIN_LENGTH,
)

logger = get_logger(__name__)


def normalize_tag_name(name: str | None) -> str:
    """Normalize a tag or category name (trimmed, lowercase)."""
    if not name:
        return ""
    return name.strip().lower()


def validate_tag_name(name: str | None, field: str = "tags") -> str:
    """Normalize a name and check it against the tag length bounds.

    Raises:
        InvalidInputError: If the normalized name is empty or out of range.
    """
    normalized_name = normalize_tag_name(name)
    if not normalized_name:
        raise InvalidInputError("Name cannot be empty", field=field)
    if not TAG_NAME_MIN_LENGTH <= len(normalized_name) <= TAG_NAME_MAX_LENGTH:
        raise InvalidInputError(
            f"'{normalized_name}' must be between {TAG_NAME_MIN_LENGTH} "
            f"and {TAG_NAME_MAX_LENGTH} characters",
            field=field,
        )
    return normalized_name


class TagLedger:
    """Service for the canonical tag vocabulary.

    Tags are created lazily the first time a project uses them; categories
    are created explicitly. Both kinds live in the ``tags`` table and share
    one name space.
    """

    def __init__(self, db: AsyncSession):
        """Initialize the tag ledger.

        Args:
            db: The database session.
        """
        self.db = db

    async def upsert_tag_usage(self, name: str) -> Tag:
        """Find or create a tag and increment its usage counter by one.

        The find-or-create and the increment happen in a single
        ``INSERT ... ON CONFLICT DO UPDATE`` statement, so concurrent
        callers for the same name never lose a count.

        Args:
            name: Raw tag name; it is trimmed and lowercased.

        Returns:
            The tag record after the increment.

        Raises:
            InvalidInputError: If the name is empty or out of range after
                normalization.
            ConflictError: If the name already belongs to a category.
        """
        normalized_name = validate_tag_name(name, field="tags")
        now = datetime.now(timezone.utc)

        insert = self._insert_construct()
        stmt = insert(Tag).values(
            id=str(uuid.uuid4()),
            name=normalized_name,
            kind=TagKind.TAG,
            usage_count=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Tag.name],
            set_={"usage_count": Tag.usage_count + 1, "updated_at": now},
            where=Tag.kind == TagKind.TAG,
        ).returning(Tag)

        try:
            result = await self.db.execute(
                stmt, execution_options={"populate_existing": True}
            )
        except OperationalError as e:
            logger.error("tag_upsert_failed", name=normalized_name, error=str(e))
            raise StoreUnavailableError(f"Failed to record tag '{normalized_name}'") from e

        tag = result.scalar_one_or_none()
        if tag is None:
            # Conflict target matched but the WHERE rejected it: the name is a category
            raise ConflictError(
                f"'{normalized_name}' is already used as a category name"
            )

        logger.debug(
            "tag_usage_recorded",
            name=tag.name,
            usage_count=tag.usage_count,
        )
        return tag

    async def create_category(
        self,
        name: str,
        description: str | None = None,
    ) -> Tag:
        """Create a new category.

        Args:
            name: The category name (normalized to lowercase).
            description: Optional description, at most 280 characters.

        Returns:
            The newly created category.

        Raises:
            InvalidInputError: If the name or description is invalid.
            ConflictError: If a tag or category already uses the name.
        """
        normalized_name = validate_tag_name(name, field="name")
        description = description.strip() if description else None
        if description and len(description) > TAG_DESCRIPTION_MAX_LENGTH:
            raise InvalidInputError(
                f"Description cannot exceed {TAG_DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )

        existing = await self.db.execute(
            select(Tag).where(Tag.name == normalized_name)
        )
        if existing.scalar_one_or_none():
            logger.warning("category_name_taken", name=normalized_name)
            raise ConflictError(f"Category '{normalized_name}' already exists")

        category = Tag(
            name=normalized_name,
            description=description or None,
            kind=TagKind.CATEGORY,
            usage_count=0,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(category)
        except IntegrityError as e:
            # Lost a race against a concurrent insert of the same name
            raise ConflictError(f"Category '{normalized_name}' already exists") from e

        logger.info("category_created", name=normalized_name, id=category.id)
        return category

    async def list_categories(self) -> list[Tag]:
        """Get all categories ordered by name."""
        result = await self.db.execute(
            select(Tag).where(Tag.kind == TagKind.CATEGORY).order_by(Tag.name)
        )
        return list(result.scalars().all())

    async def list_tags(
        self,
        query: str | None = None,
        limit: int = 20,
    ) -> list[Tag]:
        """List canonical tags by popularity.

        Args:
            query: Optional case-insensitive substring filter on the name.
            limit: Maximum results to return.

        Returns:
            Tags ordered by usage count descending, then name.
        """
        stmt = select(Tag).where(Tag.kind == TagKind.TAG)

        normalized_query = normalize_tag_name(query)
        if normalized_query:
            stmt = stmt.where(Tag.name.contains(normalized_query, autoescape=True))

        stmt = stmt.order_by(Tag.usage_count.desc(), Tag.name).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_categories(self, category_ids: Iterable[str]) -> dict[str, Tag]:
        """Resolve category ids to category records.

        Ids that do not exist, or that point at a plain tag, are left out of
        the returned mapping.
        """
        ids = set(category_ids)
        if not ids:
            return {}

        result = await self.db.execute(
            select(Tag).where(Tag.id.in_(ids), Tag.kind == TagKind.CATEGORY)
        )
        return {tag.id: tag for tag in result.scalars().all()}

    def _insert_construct(self):
        """Pick the dialect insert that supports ON CONFLICT."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        return sqlite.insert
