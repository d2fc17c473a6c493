"""Tests for search expression building."""

from __future__ import annotations

import uuid

import pytest

from portfolio.core.exceptions import InvalidInputError
from portfolio.services.query_builder import (
    CategoryFilter,
    FuzzyTextClause,
    MatchAllClause,
    SearchRequest,
    TagFilter,
    build_expression,
    is_valid_id,
)


class TestBuildExpression:
    """Tests for build_expression."""

    def test_empty_query_matches_all(self):
        """Empty or whitespace-only queries browse every project."""
        expression = build_expression(SearchRequest(query="   "))
        assert isinstance(expression.text, MatchAllClause)
        assert expression.filters == []

    def test_text_query_terms_are_deduplicated(self):
        expression = build_expression(SearchRequest(query="React react dashboard"))
        assert isinstance(expression.text, FuzzyTextClause)
        assert expression.text.terms == ("react", "dashboard")
        assert expression.text.paths == ("project_name", "description")

    def test_tags_are_normalized(self):
        expression = build_expression(SearchRequest(tags=[" JS", "js", "React", ""]))
        assert expression.tag_filters == [TagFilter("js"), TagFilter("react")]

    def test_category_filters(self):
        category_id = str(uuid.uuid4())
        expression = build_expression(
            SearchRequest(categories=[category_id.upper(), category_id])
        )
        assert expression.category_filters == [CategoryFilter(category_id)]

    def test_malformed_category_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            build_expression(SearchRequest(categories=["not-an-id"]))
        assert exc_info.value.field == "categories"


class TestFuzzyTextClause:
    """Tests for text clause scoring."""

    def test_name_hit_outranks_description_hit(self):
        clause = FuzzyTextClause(terms=("react",))
        name_hit = clause.evaluate(
            {"project_name": "React Board", "description": "A board"}
        )
        description_hit = clause.evaluate(
            {"project_name": "Board", "description": "Built with react"}
        )
        assert name_hit > description_hit

    def test_exact_outranks_fuzzy(self):
        clause = FuzzyTextClause(terms=("widget",))
        exact = clause.evaluate({"project_name": "Widget", "description": ""})
        fuzzy = clause.evaluate({"project_name": "Widgets", "description": ""})
        assert exact > fuzzy > 0

    def test_no_hit_returns_none(self):
        clause = FuzzyTextClause(terms=("wxdgit",))
        assert clause.evaluate({"project_name": "Widget", "description": "Tool"}) is None

    def test_match_all_is_neutral(self):
        assert MatchAllClause().evaluate({}) == 0.0


def test_is_valid_id():
    assert is_valid_id(str(uuid.uuid4()))
    assert not is_valid_id("abc")
    assert not is_valid_id("")


class TestCandidateFragments:
    """Tests for the substring fragments used to narrow text candidates."""

    def test_term_is_cut_per_allowed_edit(self):
        clause = FuzzyTextClause(terms=("widget",), max_edits=1)
        assert clause.candidate_fragments() == ("wid", "get")

    def test_uneven_split(self):
        clause = FuzzyTextClause(terms=("react",), max_edits=1)
        assert clause.candidate_fragments() == ("rea", "ct")

    def test_exact_matching_uses_whole_terms(self):
        clause = FuzzyTextClause(terms=("react", "vue"), max_edits=0)
        assert clause.candidate_fragments() == ("react", "vue")

    def test_short_term_disables_narrowing(self):
        clause = FuzzyTextClause(terms=("widget", "a"), max_edits=1)
        assert clause.candidate_fragments() is None

    def test_match_all_has_no_fragments(self):
        assert MatchAllClause().candidate_fragments() is None
