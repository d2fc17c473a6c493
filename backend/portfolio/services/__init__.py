"""Business logic services for the portfolio API."""

from portfolio.services.project_store import ProjectStore, ScoredProject
from portfolio.services.query_builder import SearchExpression, SearchRequest, build_expression
from portfolio.services.search import SearchExecutor, SearchResult
from portfolio.services.suggestions import SuggestionEngine, TagSuggestion
from portfolio.services.tag_ledger import TagLedger

__all__ = [
    "ProjectStore",
    "ScoredProject",
    "SearchExecutor",
    "SearchExpression",
    "SearchRequest",
    "SearchResult",
    "SuggestionEngine",
    "TagLedger",
    "TagSuggestion",
    "build_expression",
]
