"""Keyword-only search mode resolution and keyword filter composition."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..models.search import KeywordMode, SearchRequest, SearchType
from .errors import InvalidRequest

SEARCH_BY_KEYWORDS = "search_by_keywords"
SEARCH_BY_KEYWORDS_ALL = "search_by_keywords_all"

KEYWORD_SEARCH_SUGGESTIONS = (
    "Try different keywords",
    "Use fewer keywords",
    "Switch between --all and default (OR) modes",
    "Check available keywords with: ragdoll keywords list",
)


def keyword_mode_for(keywords: Sequence[str], *, match_all: bool) -> KeywordMode:
    """AND mode maps to search_by_keywords_all, OR mode to search_by_keywords."""
    if not keywords:
        raise InvalidRequest("No keywords provided")
    method_name = SEARCH_BY_KEYWORDS_ALL if match_all else SEARCH_BY_KEYWORDS
    return KeywordMode(method_name=method_name, keywords=tuple(keywords))


def resolve_keyword_mode(request: SearchRequest) -> KeywordMode:
    """Resolve the backend keyword operation for a request."""
    return keyword_mode_for(request.keywords or (), match_all=request.keywords_all)


def keyword_filter_params(
    keywords: Optional[Sequence[str]],
    *,
    keywords_all: bool = False,
    tags: Optional[Sequence[str]] = None,
) -> dict[str, Any]:
    """Keyword and tag filters as extra backend parameters.

    Absent filters are left out entirely so the backend does not filter on
    them. `keywords_all` only travels together with keywords.
    """
    params: dict[str, Any] = {}
    if keywords:
        params["keywords"] = list(keywords)
        params["keywords_all"] = keywords_all
    if tags:
        params["tags"] = list(tags)
    return params


def request_keyword_filters(request: SearchRequest) -> dict[str, Any]:
    """Keyword filters for a text search; a keyword search uses them as its sole criterion."""
    if request.search_type == SearchType.KEYWORD:
        return {}
    return keyword_filter_params(request.keywords, keywords_all=request.keywords_all, tags=request.tags)


def matching_keywords(document_keywords: Sequence[str], wanted: Sequence[str]) -> list[str]:
    """Document keywords that were searched for, in document order."""
    wanted_set = set(wanted)
    return [keyword for keyword in document_keywords if keyword in wanted_set]
