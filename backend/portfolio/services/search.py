"""Faceted, paginated project search."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.core.config import settings
from portfolio.core.exceptions import InvalidInputError
from portfolio.core.logging import get_logger
from portfolio.db.models import Project
from portfolio.services.project_store import ProjectStore, ScoredProject
from portfolio.services.query_builder import SearchRequest, build_expression

logger = get_logger(__name__)


@dataclass
class TagFacet:
    """Number of matched projects carrying a tag."""

    name: str
    count: int


@dataclass
class CategoryFacet:
    """Number of matched projects in a category."""

    id: str
    name: str
    count: int


@dataclass
class SearchResult:
    """One page of search results plus facets over the whole match set."""

    projects: list[Project] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    tag_facets: list[TagFacet] = field(default_factory=list)
    category_facets: list[CategoryFacet] = field(default_factory=list)


class SearchExecutor:
    """Runs project searches.

    Matching, ranking, pagination and facet aggregation are computed from a
    single ranked match set, so facets always describe every match and not
    only the current page.
    """

    def __init__(self, db: AsyncSession, store: ProjectStore | None = None):
        """Initialize the search executor.

        Args:
            db: The database session.
            store: Project store sharing the same session.
        """
        self.db = db
        self.store = store or ProjectStore(db)

    async def search(self, request: SearchRequest) -> SearchResult:
        """Search projects.

        Args:
            request: Query text, tag and category filters, and page window.

        Returns:
            The requested page with totals and facets. Zero matches is a
            normal, empty result.

        Raises:
            InvalidInputError: If page or limit are out of range, or a
                category filter is malformed.
            StoreUnavailableError: If the datastore query fails.
        """
        if request.page < 1:
            raise InvalidInputError("Page must be a positive integer", field="page")
        if not 1 <= request.limit <= settings.search_max_limit:
            raise InvalidInputError(
                f"Limit must be between 1 and {settings.search_max_limit}",
                field="limit",
            )

        expression = build_expression(request)
        matches = await self.store.find_matching(expression)

        total_count = len(matches)
        skip = (request.page - 1) * request.limit
        page = matches[skip:skip + request.limit]

        result = SearchResult(
            projects=[match.project for match in page],
            total_count=total_count,
            total_pages=math.ceil(total_count / request.limit),
            tag_facets=self._tag_facets(matches),
            category_facets=self._category_facets(matches),
        )

        logger.info(
            "search_completed",
            query=request.query,
            tags=[f.name for f in expression.tag_filters],
            categories=[f.category_id for f in expression.category_filters],
            page=request.page,
            total_pages=result.total_pages,
            total_count=total_count,
        )
        return result

    def _tag_facets(self, matches: list[ScoredProject]) -> list[TagFacet]:
        """Count tags over every match, most common first."""
        counts: Counter[str] = Counter()
        for match in matches:
            counts.update(set(match.project.tags))

        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [
            TagFacet(name=name, count=count)
            for name, count in ranked[: settings.tag_facet_limit]
        ]

    def _category_facets(self, matches: list[ScoredProject]) -> list[CategoryFacet]:
        """Count categories over every match, most common first."""
        counts: Counter[str] = Counter()
        names: dict[str, str] = {}
        for match in matches:
            for category in match.project.categories:
                names[category.id] = category.name
            counts.update(set(match.project.category_ids))

        ranked = sorted(
            counts.items(), key=lambda item: (-item[1], names.get(item[0], ""))
        )
        return [
            CategoryFacet(id=category_id, name=names.get(category_id, ""), count=count)
            for category_id, count in ranked[: settings.category_facet_limit]
        ]
