"""Translate search requests into structured search expressions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from portfolio.core.config import settings
from portfolio.core.exceptions import InvalidInputError
from portfolio.services.tag_ledger import normalize_tag_name
from portfolio.services.text_match import term_match_quality, tokenize

# Project fields covered by free-text search, with their relevance weight
TEXT_SEARCH_FIELDS: dict[str, float] = {
    "project_name": 2.0,
    "description": 1.0,
}

# Score shared by every project when nothing is ranked (browse or filter-only)
NEUTRAL_SCORE = 0.0


@dataclass
class SearchRequest:
    """Caller input for a project search."""

    query: str = ""
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    page: int = 1
    limit: int = 5


@dataclass(frozen=True)
class MatchAllClause:
    """Matches every project; used when no text query is given."""

    def evaluate(self, fields: dict[str, str]) -> float | None:
        return NEUTRAL_SCORE

    def candidate_fragments(self) -> tuple[str, ...] | None:
        return None


@dataclass(frozen=True)
class FuzzyTextClause:
    """Typo-tolerant match of query terms against text fields.

    A project matches when at least one term hits one of ``paths``.
    """

    terms: tuple[str, ...]
    paths: tuple[str, ...] = tuple(TEXT_SEARCH_FIELDS)
    max_edits: int = 1

    def evaluate(self, fields: dict[str, str]) -> float | None:
        """Score field values against the query terms.

        Args:
            fields: Field name to text, covering at least ``paths``.

        Returns:
            The relevance score, or None when no term matches.
        """
        field_tokens = {path: tokenize(fields.get(path)) for path in self.paths}
        score = 0.0
        for term in self.terms:
            best = 0.0
            for path, tokens in field_tokens.items():
                quality = term_match_quality(term, tokens, self.max_edits)
                best = max(best, quality * TEXT_SEARCH_FIELDS.get(path, 1.0))
            score += best
        return score if score > 0 else None

    def candidate_fragments(self) -> tuple[str, ...] | None:
        """Substrings at least one of which every matching field contains.

        Each term is cut into ``max_edits + 1`` contiguous pieces. A token
        within ``max_edits`` edits of the term leaves at least one piece
        untouched, so a field that matches contains that piece verbatim.

        Returns:
            The fragments, or None when a term is too short to be cut and
            no substring test can narrow the candidates.
        """
        pieces = self.max_edits + 1
        fragments: list[str] = []
        for term in self.terms:
            if len(term) < pieces:
                return None
            size, extra = divmod(len(term), pieces)
            start = 0
            for index in range(pieces):
                end = start + size + (1 if index < extra else 0)
                fragments.append(term[start:end])
                start = end
        return tuple(dict.fromkeys(fragments))


@dataclass(frozen=True)
class TagFilter:
    """Project must carry this tag."""

    name: str


@dataclass(frozen=True)
class CategoryFilter:
    """Project must reference this category."""

    category_id: str


@dataclass
class SearchExpression:
    """A scoring clause plus non-scoring inclusion filters (all required)."""

    text: FuzzyTextClause | MatchAllClause
    filters: list[TagFilter | CategoryFilter] = field(default_factory=list)

    @property
    def tag_filters(self) -> list[TagFilter]:
        return [f for f in self.filters if isinstance(f, TagFilter)]

    @property
    def category_filters(self) -> list[CategoryFilter]:
        return [f for f in self.filters if isinstance(f, CategoryFilter)]


def build_expression(request: SearchRequest) -> SearchExpression:
    """Build the search expression for a request.

    Args:
        request: The search request.

    Returns:
        The structured expression.

    Raises:
        InvalidInputError: If a category filter is not a valid id.
    """
    terms = tuple(dict.fromkeys(tokenize(request.query)))
    text: FuzzyTextClause | MatchAllClause
    if terms:
        text = FuzzyTextClause(terms=terms, max_edits=settings.search_max_edits)
    else:
        text = MatchAllClause()

    filters: list[TagFilter | CategoryFilter] = []
    seen_tags: set[str] = set()
    for raw_tag in request.tags:
        name = normalize_tag_name(raw_tag)
        if name and name not in seen_tags:
            seen_tags.add(name)
            filters.append(TagFilter(name=name))

    seen_categories: set[str] = set()
    for raw_id in request.categories:
        category_id = raw_id.strip().lower() if raw_id else ""
        if not category_id or category_id in seen_categories:
            continue
        if not is_valid_id(category_id):
            raise InvalidInputError(
                f"Invalid category ID format: {category_id}", field="categories"
            )
        seen_categories.add(category_id)
        filters.append(CategoryFilter(category_id=category_id))

    return SearchExpression(text=text, filters=filters)


def is_valid_id(value: str) -> bool:
    """Check that a record id is a canonical UUID string."""
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False
