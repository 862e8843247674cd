"""Tests for keyword mode resolution and keyword filters."""

import pytest

from ragdoll_cli.search import InvalidRequest, keyword_filter_params, keyword_mode_for
from ragdoll_cli.search.keywords import (
    SEARCH_BY_KEYWORDS,
    SEARCH_BY_KEYWORDS_ALL,
    matching_keywords,
    request_keyword_filters,
)
from ragdoll_cli.search import normalize_search_request


def test_or_mode_is_default():
    mode = keyword_mode_for(["ruby"], match_all=False)

    assert mode.method_name == SEARCH_BY_KEYWORDS
    assert mode.label == "ANY keywords (OR)"
    assert mode.keywords == ("ruby",)


def test_and_mode():
    mode = keyword_mode_for(["ruby", "rails"], match_all=True)

    assert mode.method_name == SEARCH_BY_KEYWORDS_ALL
    assert mode.match_all is True
    assert mode.label == "ALL keywords (AND)"


def test_empty_keywords_rejected():
    with pytest.raises(InvalidRequest):
        keyword_mode_for([], match_all=False)


def test_filter_params_omit_absent_filters():
    """Test that keywords_all never travels without keywords."""
    assert keyword_filter_params(None, keywords_all=True) == {}
    assert keyword_filter_params(["a"]) == {"keywords": ["a"], "keywords_all": False}
    assert keyword_filter_params(None, tags=["t"]) == {"tags": ["t"]}


def test_keyword_search_does_not_send_filters():
    request = normalize_search_request({"query": "", "keywords": "ruby"})

    assert request_keyword_filters(request) == {}


def test_matching_keywords_preserves_document_order():
    assert matching_keywords(["web", "ruby", "rails"], ["rails", "ruby"]) == ["ruby", "rails"]
