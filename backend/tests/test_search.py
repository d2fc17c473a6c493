"""Tests for the search executor."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio.core.config import settings
from portfolio.core.exceptions import InvalidInputError
from portfolio.services.project_store import ProjectStore
from portfolio.services.query_builder import SearchRequest
from portfolio.services.search import SearchExecutor
from portfolio.services.tag_ledger import TagLedger


async def seed_projects(session: AsyncSession) -> dict[str, str]:
    """Create three categorized projects and return category ids by name."""
    ledger = TagLedger(session)
    web = await ledger.create_category("web")
    cli = await ledger.create_category("cli")

    store = ProjectStore(session, ledger)
    await store.create(
        {
            "project_name": "React Dashboard",
            "description": "Charts and widgets for metrics",
            "tags": ["js", "react"],
            "categories": [web.id],
        }
    )
    await store.create(
        {
            "project_name": "Vue Storefront",
            "description": "A shop written with react ideas in mind",
            "tags": ["js", "vue"],
            "categories": [web.id],
        }
    )
    await store.create(
        {
            "project_name": "Log Parser",
            "description": "Command line tool for parsing logs",
            "tags": ["python"],
            "categories": [cli.id],
        }
    )
    return {"web": web.id, "cli": cli.id}


class TestSearch:
    """Tests for SearchExecutor.search."""

    async def test_browse_newest_first(self, db_session: AsyncSession):
        """An empty query lists every project, newest first."""
        await seed_projects(db_session)

        result = await SearchExecutor(db_session).search(SearchRequest(limit=10))

        assert result.total_count == 3
        assert result.total_pages == 1
        assert [p.project_name for p in result.projects] == [
            "Log Parser",
            "Vue Storefront",
            "React Dashboard",
        ]

    async def test_relevance_ranking(self, db_session: AsyncSession):
        """A name hit ranks above a description-only hit."""
        await seed_projects(db_session)

        result = await SearchExecutor(db_session).search(SearchRequest(query="react"))

        assert [p.project_name for p in result.projects] == [
            "React Dashboard",
            "Vue Storefront",
        ]

    async def test_pagination(self, db_session: AsyncSession):
        await seed_projects(db_session)
        executor = SearchExecutor(db_session)

        first = await executor.search(SearchRequest(page=1, limit=2))
        second = await executor.search(SearchRequest(page=2, limit=2))
        beyond = await executor.search(SearchRequest(page=5, limit=2))

        assert first.total_pages == second.total_pages == beyond.total_pages == 2
        assert len(first.projects) == 2
        assert len(second.projects) == 1
        seen = {p.id for p in first.projects} | {p.id for p in second.projects}
        assert len(seen) == 3
        assert beyond.projects == []
        assert beyond.total_count == 3

    async def test_facets_cover_all_matches(self, db_session: AsyncSession):
        """Facets count every match, not only the returned page."""
        category_ids = await seed_projects(db_session)

        result = await SearchExecutor(db_session).search(SearchRequest(limit=1))

        assert [(f.name, f.count) for f in result.tag_facets] == [
            ("js", 2),
            ("python", 1),
            ("react", 1),
            ("vue", 1),
        ]
        assert [(f.id, f.name, f.count) for f in result.category_facets] == [
            (category_ids["web"], "web", 2),
            (category_ids["cli"], "cli", 1),
        ]

    async def test_filters_and_text_combine(self, db_session: AsyncSession):
        category_ids = await seed_projects(db_session)

        result = await SearchExecutor(db_session).search(
            SearchRequest(query="react", tags=["vue"], categories=[category_ids["web"]])
        )

        assert [p.project_name for p in result.projects] == ["Vue Storefront"]
        assert [(f.name, f.count) for f in result.tag_facets] == [("js", 1), ("vue", 1)]

    async def test_no_matches(self, db_session: AsyncSession):
        await seed_projects(db_session)

        result = await SearchExecutor(db_session).search(SearchRequest(query="zzzzzz"))

        assert result.projects == []
        assert result.total_count == 0
        assert result.total_pages == 0
        assert result.tag_facets == []
        assert result.category_facets == []

    @pytest.mark.parametrize("page,limit", [(0, 5), (1, 0), (1, 51)])
    async def test_invalid_window(self, db_session: AsyncSession, page, limit):
        with pytest.raises(InvalidInputError):
            await SearchExecutor(db_session).search(
                SearchRequest(page=page, limit=limit)
            )


async def seed_many_projects(session: AsyncSession) -> list[str]:
    """Create 13 projects over 13 tags and 7 categories with graded counts.

    Project ``i`` carries tags t00..t{i} and categories cat0..cat{min(i, 6)},
    so tag ``tNN`` is on 13 - NN projects and ``catN`` on 13 - N.
    """
    ledger = TagLedger(session)
    category_ids = [(await ledger.create_category(f"cat{n}")).id for n in range(7)]

    store = ProjectStore(session, ledger)
    for i in range(13):
        await store.create(
            {
                "project_name": f"Project {i:02d}",
                "description": "Seeded for facet and paging tests",
                "tags": [f"t{j:02d}" for j in range(i + 1)],
                "categories": category_ids[: min(i, 6) + 1],
            }
        )
    return category_ids


class TestFacetLimitsAndPaging:
    """Facet cutoffs and page consistency over a larger match set."""

    async def test_facets_are_cut_to_configured_limits(self, db_session: AsyncSession):
        category_ids = await seed_many_projects(db_session)

        result = await SearchExecutor(db_session).search(SearchRequest(limit=1))

        assert settings.tag_facet_limit == 10
        assert settings.category_facet_limit == 5
        assert [(f.name, f.count) for f in result.tag_facets] == [
            (f"t{j:02d}", 13 - j) for j in range(10)
        ]
        assert [(f.id, f.name, f.count) for f in result.category_facets] == [
            (category_ids[n], f"cat{n}", 13 - n) for n in range(5)
        ]

    @pytest.mark.parametrize("query", ["", "project"])
    async def test_pages_concatenate_to_full_ranking(
        self, db_session: AsyncSession, query
    ):
        """Walking every page yields the full ranked list, in order."""
        await seed_many_projects(db_session)
        executor = SearchExecutor(db_session)

        full = await executor.search(SearchRequest(query=query, limit=50))
        paged = []
        for page in range(1, 6):
            result = await executor.search(
                SearchRequest(query=query, page=page, limit=3)
            )
            assert result.total_pages == 5
            assert result.total_count == 13
            paged.extend(p.id for p in result.projects)

        assert len(full.projects) == 13
        assert paged == [p.id for p in full.projects]
