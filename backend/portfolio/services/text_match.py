"""Typo-tolerant term matching used by search and tag autocomplete."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence

from rapidfuzz.distance import Levenshtein

# Relevance contributed by a term hit, by match quality
EXACT_MATCH_SCORE = 1.0
FUZZY_MATCH_SCORE = 0.5

_TOKEN_RE = re.compile(r"\w+")


def tokenize(text: str | None) -> list[str]:
    """Split text into lowercase word tokens."""
    if not text:
        return []
    text = unicodedata.normalize("NFKC", text).lower()
    return _TOKEN_RE.findall(text)


def term_match_quality(term: str, tokens: Sequence[str], max_edits: int) -> float:
    """Score how well a query term matches any token of a field.

    Args:
        term: A normalized query term.
        tokens: Tokens of the field being searched.
        max_edits: Character insertions, deletions or substitutions tolerated.

    Returns:
        EXACT_MATCH_SCORE for an exact token, FUZZY_MATCH_SCORE for a token
        within ``max_edits``, otherwise 0.
    """
    if term in tokens:
        return EXACT_MATCH_SCORE
    if max_edits <= 0:
        return 0.0

    for token in tokens:
        if abs(len(token) - len(term)) > max_edits:
            continue
        if Levenshtein.distance(term, token, score_cutoff=max_edits) <= max_edits:
            return FUZZY_MATCH_SCORE
    return 0.0


def autocomplete_match(
    query: str,
    value: str,
    max_edits: int = 1,
    prefix_length: int = 2,
) -> bool:
    """Check whether a tag value completes a partially typed query.

    A word of the value (or the whole value) must start with the query, or
    start with something within ``max_edits`` of it. Fuzzy completion only
    applies when the first ``prefix_length`` characters match exactly.
    """
    if not query:
        return False

    candidates = [value, *tokenize(value)]
    for candidate in candidates:
        if candidate.startswith(query):
            return True
        if max_edits <= 0 or len(query) < prefix_length:
            continue
        if candidate[:prefix_length] != query[:prefix_length]:
            continue
        for length in range(len(query) - max_edits, len(query) + max_edits + 1):
            if length <= 0 or length > len(candidate):
                continue
            prefix = candidate[:length]
            if Levenshtein.distance(query, prefix, score_cutoff=max_edits) <= max_edits:
                return True
    return False
