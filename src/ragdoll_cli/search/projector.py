"""Project strategy-specific backend responses onto a uniform result list."""

from __future__ import annotations

from typing import Any, Optional

from ..models.search import SearchRequest, SearchResult, SearchType
from .fields import as_float, as_int, as_str_tuple, as_text, first_present, lookup

# Score key precedence per strategy, then the generic fallback.
STRATEGY_SCORE_KEYS: dict[SearchType, tuple[str, ...]] = {
    SearchType.SEMANTIC: ("similarity",),
    SearchType.HYBRID: ("combined_score", "weighted_score"),
    SearchType.FULLTEXT: ("fulltext_similarity",),
    SearchType.KEYWORD: (),
}
GENERIC_SCORE_KEYS = ("score", "similarity")

ID_KEYS = ("document_id", "id")
TITLE_KEYS = ("title", "document_title")
CONTENT_KEYS = ("content", "text")


def score_keys_for(search_type: SearchType) -> tuple[str, ...]:
    keys = STRATEGY_SCORE_KEYS[search_type] + GENERIC_SCORE_KEYS
    # Keep first occurrence only
    return tuple(dict.fromkeys(keys))


def extract_raw_results(raw_response: Any) -> list[Any]:
    """Result entries of a response: a bare list, or its `results` field."""
    if isinstance(raw_response, (list, tuple)):
        return list(raw_response)
    results = lookup(raw_response, "results")
    if isinstance(results, (list, tuple)):
        return list(results)
    return []


def project_result(entry: Any, search_type: SearchType) -> SearchResult:
    return SearchResult(
        id=as_text(first_present(entry, ID_KEYS)),
        title=as_text(first_present(entry, TITLE_KEYS)),
        content=as_text(first_present(entry, CONTENT_KEYS)),
        score=as_float(first_present(entry, score_keys_for(search_type))),
        keywords=as_str_tuple(lookup(entry, "keywords")),
    )


def project(raw_response: Any, request: SearchRequest) -> list[SearchResult]:
    """Uniform results for a raw backend response. Never raises on malformed fields."""
    return [
        project_result(entry, request.search_type)
        for entry in extract_raw_results(raw_response)
        if entry is not None
    ]


def total_results(raw_response: Any) -> Optional[int]:
    return as_int(lookup(raw_response, "total_results"))


def execution_time_ms(raw_response: Any) -> Optional[int]:
    return as_int(lookup(raw_response, "execution_time_ms"))
