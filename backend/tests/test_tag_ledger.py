"""Tests for the tag ledger."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from portfolio.core.exceptions import ConflictError, InvalidInputError
from portfolio.db.base import Base
from portfolio.db.models import Tag, TagKind
from portfolio.services.tag_ledger import TagLedger, normalize_tag_name


class TestUpsertTagUsage:
    """Tests for upsert_tag_usage."""

    async def test_creates_tag_with_count_one(self, db_session: AsyncSession):
        """First use of a name creates the tag."""
        ledger = TagLedger(db_session)

        tag = await ledger.upsert_tag_usage("  Python ")

        assert tag.name == "python"
        assert tag.kind == TagKind.TAG
        assert tag.usage_count == 1

    async def test_increments_existing_tag(self, db_session: AsyncSession):
        """Repeated use increments the same record."""
        ledger = TagLedger(db_session)

        first = await ledger.upsert_tag_usage("python")
        second = await ledger.upsert_tag_usage("PYTHON")

        assert second.id == first.id
        assert second.usage_count == 2

        result = await db_session.execute(select(Tag).where(Tag.name == "python"))
        assert len(result.scalars().all()) == 1

    async def test_rejects_out_of_range_names(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)

        with pytest.raises(InvalidInputError):
            await ledger.upsert_tag_usage("a")
        with pytest.raises(InvalidInputError):
            await ledger.upsert_tag_usage("   ")
        with pytest.raises(InvalidInputError):
            await ledger.upsert_tag_usage("x" * 51)

    async def test_category_name_conflicts(self, db_session: AsyncSession):
        """A tag cannot reuse the name of a category."""
        ledger = TagLedger(db_session)
        category = await ledger.create_category("web")

        with pytest.raises(ConflictError):
            await ledger.upsert_tag_usage("Web")

        await db_session.refresh(category)
        assert category.usage_count == 0
        assert category.kind == TagKind.CATEGORY


async def test_concurrent_upserts_count_every_use(tmp_path):
    """Parallel upserts for one name from separate sessions never lose a count."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async def record_use():
        async with async_session() as session:
            await TagLedger(session).upsert_tag_usage("python")
            await session.commit()

    try:
        await asyncio.gather(*(record_use() for _ in range(10)))

        async with async_session() as session:
            result = await session.execute(select(Tag).where(Tag.name == "python"))
            tags = result.scalars().all()
    finally:
        await engine.dispose()

    assert len(tags) == 1
    assert tags[0].usage_count == 10


class TestCategories:
    """Tests for category management."""

    async def test_create_category(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)

        category = await ledger.create_category(" Web Apps ", "Things in a browser")

        assert category.name == "web apps"
        assert category.kind == TagKind.CATEGORY
        assert category.usage_count == 0
        assert category.description == "Things in a browser"

    async def test_duplicate_category_conflicts(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)
        await ledger.create_category("web")

        with pytest.raises(ConflictError):
            await ledger.create_category("WEB")

    async def test_category_cannot_reuse_tag_name(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)
        await ledger.upsert_tag_usage("python")

        with pytest.raises(ConflictError):
            await ledger.create_category("python")

    async def test_description_too_long(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)

        with pytest.raises(InvalidInputError) as exc_info:
            await ledger.create_category("web", "x" * 281)
        assert exc_info.value.field == "description"

    async def test_list_and_resolve_categories(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)
        web = await ledger.create_category("web")
        cli = await ledger.create_category("cli")
        tag = await ledger.upsert_tag_usage("python")

        categories = await ledger.list_categories()
        assert [c.name for c in categories] == ["cli", "web"]

        found = await ledger.get_categories([web.id, cli.id, tag.id, "missing"])
        assert set(found) == {web.id, cli.id}


class TestListTags:
    """Tests for list_tags."""

    async def test_ordered_by_usage_then_name(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)
        for name in ["react", "python", "python", "rust", "rust"]:
            await ledger.upsert_tag_usage(name)
        await ledger.create_category("web")

        tags = await ledger.list_tags()

        assert [(t.name, t.usage_count) for t in tags] == [
            ("python", 2),
            ("rust", 2),
            ("react", 1),
        ]

    async def test_substring_filter_and_limit(self, db_session: AsyncSession):
        ledger = TagLedger(db_session)
        for name in ["react", "preact", "python"]:
            await ledger.upsert_tag_usage(name)

        tags = await ledger.list_tags(query="ACT", limit=5)
        assert sorted(t.name for t in tags) == ["preact", "react"]

        tags = await ledger.list_tags(limit=1)
        assert len(tags) == 1


def test_normalize_tag_name():
    assert normalize_tag_name("  React ") == "react"
    assert normalize_tag_name(None) == ""
