"""Tests for search request normalization."""

import pytest

from ragdoll_cli.models.search import SearchType
from ragdoll_cli.search import InvalidRequest, normalize_search_request
from ragdoll_cli.search.normalizer import parse_bool_flag, parse_positive_int, split_list_flag


def test_defaults_to_semantic_with_limit_10():
    """Test that a bare query becomes a semantic search with default limit."""
    request = normalize_search_request({"query": "ruby"})

    assert request.search_type == SearchType.SEMANTIC
    assert request.limit == 10
    assert request.threshold is None
    assert request.keywords is None
    assert request.track_search is True


def test_comma_separated_keywords_are_trimmed_and_empties_dropped():
    """Test keyword flag splitting."""
    request = normalize_search_request({"query": "x", "keywords": " ruby, ,rails ,"})

    assert request.keywords == ("ruby", "rails")


def test_keywords_with_no_usable_tokens_become_absent():
    """Test that ' , ,' yields no keyword filter at all."""
    request = normalize_search_request({"query": "x", "keywords": " , ,"})

    assert request.keywords is None


def test_split_list_flag_accepts_lists():
    assert split_list_flag(["a,b", " c "]) == ("a", "b", "c")
    assert split_list_flag([]) is None
    assert split_list_flag(None) is None


def test_numeric_strings_are_parsed():
    """Test that numeric flags arrive as strings and are converted."""
    request = normalize_search_request({
        "query": "x",
        "limit": "5",
        "threshold": "0.42",
        "semantic_weight": "0.6",
        "text_weight": "0.4",
    })

    assert request.limit == 5
    assert request.threshold == 0.42
    assert request.semantic_weight == 0.6
    assert request.text_weight == 0.4


def test_unparseable_threshold_is_rejected():
    with pytest.raises(InvalidRequest, match="threshold"):
        normalize_search_request({"query": "x", "threshold": "high"})


@pytest.mark.parametrize("limit", [0, -3, "0"])
def test_non_positive_limit_is_rejected(limit):
    with pytest.raises(InvalidRequest, match="limit"):
        normalize_search_request({"query": "x", "limit": limit})


def test_empty_query_is_rejected():
    with pytest.raises(InvalidRequest, match="empty"):
        normalize_search_request({"query": "   "})


def test_unknown_search_type_is_rejected():
    """Test that an unrecognized type is an error instead of a silent default."""
    with pytest.raises(InvalidRequest, match="Invalid search type 'vector'"):
        normalize_search_request({"query": "x", "search_type": "vector"})


def test_out_of_range_threshold_passes_through():
    """Test that thresholds outside [0, 1] are kept and flagged, not clamped."""
    request = normalize_search_request({"query": "x", "threshold": 1.5})

    assert request.threshold == 1.5
    assert request.threshold_out_of_range is True


def test_keywords_without_query_infer_keyword_search():
    """Test keyword-only inference when no type and no query are given."""
    request = normalize_search_request({"query": "", "keywords": "ruby,rails"})

    assert request.search_type == SearchType.KEYWORD
    assert request.query == "ruby rails"
    assert request.keywords == ("ruby", "rails")


def test_explicit_keyword_search_requires_keywords():
    with pytest.raises(InvalidRequest, match="at least one keyword"):
        normalize_search_request({"query": "ruby", "search_type": "keyword"})


def test_hybrid_weights_are_kept_as_given():
    """Test that hybrid weights are not renormalized."""
    request = normalize_search_request({
        "query": "x",
        "search_type": "hybrid",
        "semantic_weight": 0.9,
        "text_weight": 0.9,
    })

    assert request.search_type == SearchType.HYBRID
    assert request.semantic_weight == 0.9
    assert request.text_weight == 0.9


def test_request_is_immutable():
    request = normalize_search_request({"query": "x"})

    with pytest.raises(Exception):
        request.limit = 50


def test_parse_bool_flag():
    assert parse_bool_flag("yes", name="x", default=False) is True
    assert parse_bool_flag("off", name="x", default=True) is False
    assert parse_bool_flag(None, name="x", default=True) is True
    with pytest.raises(InvalidRequest):
        parse_bool_flag("maybe", name="x", default=False)


def test_parse_positive_int_default():
    assert parse_positive_int(None, name="limit", default=20) == 20
    assert parse_positive_int("7", name="limit", default=20) == 7


def test_duplicate_keywords_and_tags_are_kept():
    """Test that splitting preserves order and duplicates."""
    request = normalize_search_request({"query": "x", "keywords": "ruby,ruby", "tags": "a, b ,a"})

    assert request.keywords == ("ruby", "ruby")
    assert request.tags == ("a", "b", "a")


def test_search_type_is_case_sensitive():
    with pytest.raises(InvalidRequest, match="Invalid search type 'Semantic'"):
        normalize_search_request({"query": "x", "search_type": "Semantic"})


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf", float("nan"), float("inf")])
def test_non_finite_numbers_are_rejected(raw):
    """Test that NaN and infinities never reach the backend."""
    with pytest.raises(InvalidRequest, match="finite"):
        normalize_search_request({"query": "x", "threshold": raw})
    with pytest.raises(InvalidRequest, match="finite"):
        normalize_search_request({"query": "x", "search_type": "hybrid", "semantic_weight": raw})
