"""Tests for search dispatch."""

from unittest.mock import Mock

import pytest

from ragdoll_cli.backend import BackendClient, BackendError
from ragdoll_cli.search import dispatch, normalize_search_request
from ragdoll_cli.search.strategy import build_search_filters


@pytest.fixture
def backend():
    mock = Mock(spec=BackendClient)
    for name in ("search", "hybrid_search", "fulltext_search", "search_by_keywords", "search_by_keywords_all"):
        getattr(mock, name).return_value = {"results": []}
    return mock


def test_semantic_search_calls_search_only(backend):
    """Test that exactly one backend operation is invoked."""
    request = normalize_search_request({"query": "ruby"})

    dispatch(request, backend)

    backend.search.assert_called_once_with("ruby", limit=10, track_search=True)
    backend.hybrid_search.assert_not_called()
    backend.fulltext_search.assert_not_called()


def test_hybrid_weights_forwarded_exactly(backend):
    """Test that hybrid weights reach the backend without renormalization."""
    request = normalize_search_request({
        "query": "rails",
        "search_type": "hybrid",
        "semantic_weight": 0.6,
        "text_weight": 0.4,
    })

    dispatch(request, backend)

    args, kwargs = backend.hybrid_search.call_args
    assert args == ("rails",)
    assert kwargs["semantic_weight"] == 0.6
    assert kwargs["text_weight"] == 0.4


def test_hybrid_call_carries_only_request_fields(backend):
    """Test that a hybrid call sends the weights and nothing beyond what was asked."""
    request = normalize_search_request({
        "query": "data pipeline",
        "search_type": "hybrid",
        "semantic_weight": 0.6,
        "text_weight": 0.4,
    })

    dispatch(request, backend)

    backend.hybrid_search.assert_called_once_with(
        "data pipeline",
        limit=10,
        track_search=True,
        semantic_weight=0.6,
        text_weight=0.4,
    )
    backend.search.assert_not_called()


def test_weights_dropped_for_non_hybrid(backend):
    request = normalize_search_request({"query": "x", "semantic_weight": 0.6})

    assert "semantic_weight" not in build_search_filters(request)


def test_fulltext_search_dispatch(backend):
    request = normalize_search_request({"query": "x", "search_type": "fulltext", "threshold": 0.2})

    dispatch(request, backend)

    backend.fulltext_search.assert_called_once_with("x", limit=10, threshold=0.2, track_search=True)


def test_keyword_all_mode_dispatch(backend):
    """Test that AND mode calls search_by_keywords_all with the limit."""
    request = normalize_search_request({
        "query": "",
        "search_type": "keyword",
        "keywords": "ruby,rails",
        "keywords_all": True,
    })

    dispatch(request, backend)

    backend.search_by_keywords_all.assert_called_once_with(["ruby", "rails"], limit=10)
    backend.search_by_keywords.assert_not_called()


def test_keyword_any_mode_dispatch(backend):
    request = normalize_search_request({"query": "", "keywords": "ruby", "limit": 3})

    dispatch(request, backend)

    backend.search_by_keywords.assert_called_once_with(["ruby"], limit=3)


def test_keyword_filters_forwarded_for_text_search(backend):
    """Test keyword filter composition for a semantic search."""
    request = normalize_search_request({
        "query": "web",
        "keywords": "ruby,rails",
        "keywords_all": True,
        "tags": "guide",
    })

    filters = build_search_filters(request)

    assert filters["keywords"] == ["ruby", "rails"]
    assert filters["keywords_all"] is True
    assert filters["tags"] == ["guide"]


def test_absent_filters_are_omitted(backend):
    filters = build_search_filters(normalize_search_request({"query": "x"}))

    assert set(filters) == {"limit", "track_search"}


def test_session_and_user_forwarded(backend):
    request = normalize_search_request({
        "query": "x",
        "session_id": "s-1",
        "user_id": "u-1",
        "track_search": False,
    })

    filters = build_search_filters(request)

    assert filters["session_id"] == "s-1"
    assert filters["user_id"] == "u-1"
    assert filters["track_search"] is False


def test_backend_failure_is_wrapped(backend):
    """Test that unexpected exceptions surface as BackendError."""
    backend.search.side_effect = ConnectionError("refused")

    with pytest.raises(BackendError, match="refused"):
        dispatch(normalize_search_request({"query": "x"}), backend)


def test_error_indicator_raises(backend):
    backend.search.return_value = {"error": "index unavailable"}

    with pytest.raises(BackendError, match="index unavailable"):
        dispatch(normalize_search_request({"query": "x"}), backend)


def test_raw_response_returned_untouched(backend):
    response = {"results": [{"id": 1}], "extra": object()}
    backend.search.return_value = response

    assert dispatch(normalize_search_request({"query": "x"}), backend) is response
