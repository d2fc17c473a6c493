"""Tag suggestions: canonical ledger, live project usage, and free text."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.core.config import settings
from portfolio.core.exceptions import InvalidInputError, StoreUnavailableError
from portfolio.core.logging import get_logger
from portfolio.db.models import ProjectTag, Tag
from portfolio.services.tag_ledger import TagLedger, normalize_tag_name
from portfolio.services.text_match import autocomplete_match, tokenize

logger = get_logger(__name__)

# Keyword suggestions returned for a piece of text
TEXT_SUGGESTION_LIMIT = 10

STOP_WORDS = frozenset(
    """
    a about above after again against all am an and any are as at be because
    been before being below between both but by can could did do does doing
    down during each few for from further had has have having he her here
    hers herself him himself his how i if in into is it its itself just me
    more most my myself no nor not now of off on once only or other our ours
    ourselves out over own same she should so some such than that the their
    theirs them themselves then there these they this those through to too
    under until up very was we were what when where which while who whom why
    will with would you your yours yourself yourselves also using use used
    via new one two get got make made like really
    """.split()
)


@dataclass
class TagSuggestion:
    """A tag value in use on projects, with the number of projects using it."""

    name: str
    count: int


class SuggestionEngine:
    """Service for ranked tag-name completions."""

    def __init__(self, db: AsyncSession, ledger: TagLedger | None = None):
        """Initialize the suggestion engine.

        Args:
            db: The database session.
            ledger: Tag ledger sharing the same session.
        """
        self.db = db
        self.ledger = ledger or TagLedger(db)

    async def suggest_from_ledger(self, query: str | None, limit: int) -> list[Tag]:
        """Suggest canonical tags, most used first."""
        return await self.ledger.list_tags(query=query, limit=limit)

    async def suggest_from_live_usage(
        self,
        query: str | None,
        limit: int,
    ) -> list[TagSuggestion]:
        """Autocomplete tag values actually carried by projects.

        The project records are read directly, so tags show up here even if
        the canonical ledger lags behind.

        Args:
            query: Partially typed tag; an empty query yields no suggestions.
            limit: Maximum suggestions to return.

        Returns:
            Suggestions ranked by project count descending, then name.
        """
        normalized_query = normalize_tag_name(query)
        if not normalized_query:
            return []

        prefix_length = settings.suggestion_prefix_length
        stmt = select(ProjectTag.name, func.count(ProjectTag.project_id)).group_by(
            ProjectTag.name
        )
        if prefix_length and len(normalized_query) >= prefix_length:
            # Every accepted value contains the exact leading characters
            stmt = stmt.where(
                ProjectTag.name.contains(
                    normalized_query[:prefix_length], autoescape=True
                )
            )

        try:
            result = await self.db.execute(stmt)
            rows = result.all()
        except OperationalError as e:
            logger.error("tag_usage_query_failed", query=normalized_query, error=str(e))
            raise StoreUnavailableError("Failed to load tag usage") from e

        suggestions = [
            TagSuggestion(name=name, count=count)
            for name, count in rows
            if autocomplete_match(
                normalized_query,
                name,
                max_edits=settings.search_max_edits,
                prefix_length=prefix_length,
            )
        ]
        suggestions.sort(key=lambda s: (-s.count, s.name))

        logger.debug(
            "live_tag_suggestions",
            query=normalized_query,
            candidates=len(rows),
            matched=len(suggestions),
        )
        return suggestions[:limit]

    def suggest_from_text(
        self,
        title: str | None,
        body: str | None,
        limit: int = TEXT_SUGGESTION_LIMIT,
    ) -> list[str]:
        """Suggest tags for a draft from its most frequent keywords.

        Args:
            title: Draft title.
            body: Draft body text.
            limit: Maximum keywords to return.

        Returns:
            Keywords ranked by frequency, ties broken by first appearance.

        Raises:
            InvalidInputError: If the title or body is empty.
        """
        if not title or not title.strip():
            raise InvalidInputError("Title is required", field="title")
        if not body or not body.strip():
            raise InvalidInputError("Body is required", field="body")

        terms = [
            term
            for term in tokenize(f"{title} {body}")
            if len(term) > 1 and term not in STOP_WORDS and not term.isdigit()
        ]
        counts = Counter(terms)
        first_seen = {term: index for index, term in reversed(list(enumerate(terms)))}

        ranked = sorted(counts, key=lambda term: (-counts[term], first_seen[term]))
        return ranked[:limit]
