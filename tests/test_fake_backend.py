"""Tests for the in-memory backend."""

from datetime import datetime, timedelta, timezone

import pytest

from ragdoll_cli.backend import BackendError, FakeBackendClient
from ragdoll_cli.search import normalize_search_request, run_search


def test_semantic_search_reports_statistics(fake_backend):
    response = fake_backend.search("ruby rails", threshold=0.1)

    assert response["results"][0]["document_id"] == "1"
    stats = response["statistics"]
    assert stats["threshold_used"] == 0.1
    assert stats["total_embeddings_checked"] == 3
    assert stats["similarities_above_threshold"] == len(response["results"])


def test_default_threshold_applies(fake_backend):
    response = fake_backend.search("completely unrelated words")

    assert response["results"] == []
    assert response["statistics"]["threshold_used"] == 0.7
    assert response["statistics"]["highest_similarity"] == 0.0


def test_hybrid_results_carry_both_score_keys(fake_backend):
    response = fake_backend.hybrid_search("ruby", threshold=0.0, semantic_weight=0.5, text_weight=0.5)

    first = response["results"][0]
    assert first["combined_score"] == first["weighted_score"]


def test_keyword_filters(fake_backend):
    response = fake_backend.search("ruby", threshold=0.0, keywords=["ruby", "rails"], keywords_all=True)

    assert [r["document_id"] for r in response["results"]] == ["1"]


def test_keyword_search_any_and_all(fake_backend):
    any_mode = fake_backend.search_by_keywords(["ruby", "rails"])
    all_mode = fake_backend.search_by_keywords_all(["ruby", "rails"])

    assert [d["id"] for d in any_mode] == ["1", "3"]
    assert any_mode[0]["match_count"] == 2
    assert [d["id"] for d in all_mode] == ["1"]


def test_unknown_document_raises(fake_backend):
    with pytest.raises(BackendError) as exc_info:
        fake_backend.get_document("99")

    assert exc_info.value.status_code == 404


def test_update_and_delete(fake_backend):
    assert fake_backend.update_document("2", title="Renamed")["success"] is True
    assert fake_backend.get_document("2")["title"] == "Renamed"

    assert fake_backend.delete_document("2")["success"] is True
    assert fake_backend.delete_document("2")["success"] is False


def test_keyword_edits(fake_backend):
    assert fake_backend.add_keywords_to_document("2", ["ml", "data"])["keywords"] == ["python", "data", "ml"]
    assert fake_backend.remove_keywords_from_document("2", ["python"])["keywords"] == ["data", "ml"]
    assert fake_backend.set_document_keywords("2", [])["keywords"] == []
    assert fake_backend.set_document_keywords("42", ["x"])["success"] is False


def test_keyword_frequencies_respects_limit_and_min_count(fake_backend):
    assert fake_backend.keyword_frequencies() == {
        "ruby": 2,
        "data": 1,
        "python": 1,
        "rails": 1,
        "scripting": 1,
        "web": 1,
    }
    assert fake_backend.keyword_frequencies(min_count=2) == {"ruby": 2}
    assert list(fake_backend.keyword_frequencies(limit=2)) == ["ruby", "data"]


def test_document_status(fake_backend):
    assert fake_backend.document_status("1")["embeddings_ready"] is True
    assert fake_backend.document_status("3")["embeddings_ready"] is False


def test_search_analytics_from_log():
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    clock = {"now": now - timedelta(days=40)}
    backend = FakeBackendClient(now=lambda: clock["now"])
    backend.seed_document(title="Doc", content="alpha beta")

    backend.search("gamma", user_id="u1")
    clock["now"] = now
    backend.search("alpha beta", threshold=0.1, session_id="s1")
    backend.search("alpha beta", threshold=0.1, track_search=False)

    overview = backend.search_analytics(days=30)
    assert overview["total_searches"] == 1
    assert overview["searches_with_results"] == 1

    assert [h["query"] for h in backend.search_history()] == ["alpha beta", "gamma"]
    assert [h["query"] for h in backend.search_history(user_id="u1")] == ["gamma"]
    assert backend.trending_queries(days=7) == [{"query": "alpha beta", "count": 1, "avg_results": 1.0}]

    assert backend.cleanup_searches(days=30, dry_run=True)["unused_count"] == 1
    assert len(backend.search_history()) == 2
    backend.cleanup_searches(days=30, dry_run=False)
    assert len(backend.search_history()) == 1


def test_run_search_end_to_end_diagnoses_empty(fake_backend):
    """Test that an empty fake search is diagnosed from its statistics."""
    request = normalize_search_request({"query": "ruby"})

    outcome = run_search(request, fake_backend)

    assert outcome.empty
    assert outcome.diagnostics.suggested_threshold is not None
    assert outcome.diagnostics.suggested_threshold < 0.7
