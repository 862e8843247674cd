"""Deterministic in-memory backend.

Used by the test suite and selectable with `backend.kind: fake` to try the
CLI without a server. Similarity is plain token overlap, so the same corpus
and query always produce the same scores.
"""

import logging
import math
import re
import threading
import time
from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from .client import BackendClient, BackendError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9]+")

DEFAULT_SEMANTIC_WEIGHT = 0.7
DEFAULT_TEXT_WEIGHT = 0.3
EMBEDDING_CHUNK_CHARS = 1000


def _tokens(text: str) -> set[str]:
    return set(_TOKEN_RE.findall(text.lower()))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


class FakeBackendClient(BackendClient):
    """In-memory Ragdoll backend with deterministic scoring.

    Semantic similarity is the cosine of binary token sets, full-text
    similarity is the fraction of query tokens found in the document, and
    hybrid blends the two with 0.7/0.3 unless weights are given.
    """

    def __init__(
        self,
        similarity_threshold: float = 0.7,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.similarity_threshold = similarity_threshold
        self._now = now
        self._documents: dict[str, dict[str, Any]] = {}
        self._search_log: list[dict[str, Any]] = []
        self._next_id = 1
        self._lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        return "fake"

    def seed_document(
        self,
        title: str,
        content: str,
        keywords: Optional[list[str]] = None,
        status: str = "processed",
        document_type: str = "text",
        metadata: Optional[dict[str, Any]] = None,
    ) -> str:
        """Insert a document directly and return its id."""
        with self._lock:
            document_id = str(self._next_id)
            self._next_id += 1
            self._documents[document_id] = {
                "id": document_id,
                "title": title,
                "content": content,
                "keywords": _dedupe(list(keywords or [])),
                "status": status,
                "document_type": document_type,
                "embeddings_count": max(1, math.ceil(len(content) / EMBEDDING_CHUNK_CHARS)),
                "metadata": dict(metadata or {}),
                "created_at": self._now().isoformat(),
                "updated_at": self._now().isoformat(),
            }
        return document_id

    def _require(self, document_id: str) -> dict[str, Any]:
        document = self._documents.get(str(document_id))
        if document is None:
            raise BackendError(f"Document {document_id} does not exist", status_code=404)
        return document

    # Scoring

    @staticmethod
    def _semantic_similarity(query_tokens: set[str], doc_tokens: set[str]) -> float:
        if not query_tokens or not doc_tokens:
            return 0.0
        overlap = len(query_tokens & doc_tokens)
        return overlap / math.sqrt(len(query_tokens) * len(doc_tokens))

    @staticmethod
    def _fulltext_similarity(query_tokens: set[str], doc_tokens: set[str]) -> float:
        if not query_tokens:
            return 0.0
        return len(query_tokens & doc_tokens) / len(query_tokens)

    def _matches_filters(
        self,
        document: dict[str, Any],
        *,
        content_type: Optional[str],
        classification: Optional[str],
        keywords: Optional[list[str]],
        keywords_all: bool,
        tags: Optional[list[str]],
    ) -> bool:
        if content_type and document["document_type"] != content_type:
            return False
        if classification and document["metadata"].get("classification") != classification:
            return False
        if keywords:
            doc_keywords = {k.lower() for k in document["keywords"]}
            wanted = [k.lower() for k in keywords]
            hits = [k for k in wanted if k in doc_keywords]
            if keywords_all and len(hits) != len(wanted):
                return False
            if not keywords_all and not hits:
                return False
        if tags:
            doc_tags = set(document["metadata"].get("tags", []))
            if not doc_tags.intersection(tags):
                return False
        return True

    def _run_search(
        self,
        search_type: str,
        query: str,
        *,
        limit: int = 10,
        threshold: Optional[float] = None,
        content_type: Optional[str] = None,
        classification: Optional[str] = None,
        keywords: Optional[list[str]] = None,
        keywords_all: bool = False,
        tags: Optional[list[str]] = None,
        semantic_weight: Optional[float] = None,
        text_weight: Optional[float] = None,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
        track_search: bool = True,
    ) -> dict[str, Any]:
        started = time.perf_counter()
        threshold_used = self.similarity_threshold if threshold is None else threshold
        score_key = {
            "semantic": "similarity",
            "hybrid": "combined_score",
            "fulltext": "fulltext_similarity",
        }[search_type]
        sw = DEFAULT_SEMANTIC_WEIGHT if semantic_weight is None else semantic_weight
        tw = DEFAULT_TEXT_WEIGHT if text_weight is None else text_weight

        query_tokens = _tokens(query)
        scored: list[tuple[float, dict[str, Any]]] = []
        for document in self._documents.values():
            if not self._matches_filters(
                document,
                content_type=content_type,
                classification=classification,
                keywords=keywords,
                keywords_all=keywords_all,
                tags=tags,
            ):
                continue
            doc_tokens = _tokens(f"{document['title']} {document['content']}")
            semantic = self._semantic_similarity(query_tokens, doc_tokens)
            fulltext = self._fulltext_similarity(query_tokens, doc_tokens)
            if search_type == "semantic":
                score = semantic
            elif search_type == "fulltext":
                score = fulltext
            else:
                score = sw * semantic + tw * fulltext
            scored.append((round(score, 4), document))

        matches = sorted(
            (item for item in scored if item[0] >= threshold_used),
            key=lambda item: (-item[0], item[1]["id"]),
        )[:limit]

        results = []
        for score, document in matches:
            entry = {
                "document_id": document["id"],
                "document_title": document["title"],
                "content": document["content"][:500],
                "keywords": list(document["keywords"]),
                score_key: score,
            }
            if search_type == "hybrid":
                entry["weighted_score"] = score
            results.append(entry)

        scores = [score for score, _ in scored]
        statistics: dict[str, Any] = {
            "threshold_used": threshold_used,
            "highest_similarity": max(scores) if scores else None,
            "lowest_similarity": min(scores) if scores else None,
            "average_similarity": round(sum(scores) / len(scores), 4) if scores else None,
            "similarities_above_threshold": sum(1 for s in scores if s >= threshold_used),
            "total_embeddings_checked": len(scores),
        }
        execution_time_ms = int((time.perf_counter() - started) * 1000)

        if track_search:
            self._search_log.append({
                "query": query,
                "search_type": search_type,
                "results_count": len(results),
                "execution_time_ms": execution_time_ms,
                "session_id": session_id,
                "user_id": user_id,
                "created_at": self._now().isoformat(),
            })

        return {
            "search_type": search_type,
            "results": results,
            "statistics": statistics,
            "total_results": len(self._documents),
            "execution_time_ms": execution_time_ms,
        }

    # Retrieval

    def search(self, query: str, **filters: Any) -> Any:
        return self._run_search("semantic", query, **filters)

    def hybrid_search(self, query: str, **filters: Any) -> Any:
        return self._run_search("hybrid", query, **filters)

    def fulltext_search(self, query: str, **filters: Any) -> Any:
        return self._run_search("fulltext", query, **filters)

    def _keyword_search(self, keywords: list[str], limit: int, match_all: bool) -> list[dict[str, Any]]:
        wanted = [k.lower() for k in keywords]
        found = []
        for document in self._documents.values():
            doc_keywords = [k.lower() for k in document["keywords"]]
            hits = [k for k in wanted if k in doc_keywords]
            if not hits or (match_all and len(hits) != len(wanted)):
                continue
            found.append((len(hits), document))
        found.sort(key=lambda item: (-item[0], item[1]["id"]))
        return [
            {
                "id": document["id"],
                "title": document["title"],
                "keywords": list(document["keywords"]),
                "match_count": hits,
            }
            for hits, document in found[:limit]
        ]

    def search_by_keywords(self, keywords: list[str], limit: int = 20) -> Any:
        return self._keyword_search(keywords, limit, match_all=False)

    def search_by_keywords_all(self, keywords: list[str], limit: int = 20) -> Any:
        return self._keyword_search(keywords, limit, match_all=True)

    def get_context(self, query: str, limit: int = 5) -> Any:
        response = self._run_search("semantic", query, limit=limit, threshold=0.0, track_search=False)
        chunks = [
            {
                "content": result["content"],
                "source": result["document_title"],
                "similarity": result["similarity"],
            }
            for result in response["results"]
            if result["similarity"] > 0
        ]
        return {
            "context_chunks": chunks,
            "combined_context": "\n\n".join(chunk["content"] for chunk in chunks),
            "total_chunks": len(chunks),
        }

    def enhance_prompt(self, prompt: str, context_limit: int = 5) -> Any:
        context = self.get_context(prompt, limit=context_limit)
        if context["total_chunks"]:
            enhanced = (
                "You are given the following context:\n\n"
                f"{context['combined_context']}\n\n"
                f"Question: {prompt}"
            )
        else:
            enhanced = prompt
        return {
            "enhanced_prompt": enhanced,
            "original_prompt": prompt,
            "context_sources": [chunk["source"] for chunk in context["context_chunks"]],
            "context_count": context["total_chunks"],
        }

    # Documents

    def add_document(self, path: str, **options: Any) -> dict[str, Any]:
        file_path = Path(path)
        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise BackendError(f"Could not read {file_path}: {e}") from e

        if not content.strip():
            return {"success": False, "message": f"{file_path.name} is empty"}

        document_id = self.seed_document(
            title=options.get("title") or file_path.stem,
            content=content,
            status="processed",
            document_type="text",
            metadata={"file_path": str(file_path)},
        )
        return {
            "success": True,
            "document_id": document_id,
            "message": f"Document '{file_path.stem}' added",
        }

    def get_document(self, document_id: str) -> dict[str, Any]:
        document = self._require(document_id)
        return {
            **{key: value for key, value in document.items() if key != "content"},
            "content_length": len(document["content"]),
        }

    def update_document(self, document_id: str, **changes: Any) -> dict[str, Any]:
        document = self._documents.get(str(document_id))
        if document is None:
            return {"success": False, "message": f"Document {document_id} not found"}
        for key, value in changes.items():
            if key in ("title", "status", "document_type"):
                document[key] = value
            else:
                document["metadata"][key] = value
        document["updated_at"] = self._now().isoformat()
        return {"success": True, "message": f"Updated {', '.join(sorted(changes))}"}

    def delete_document(self, document_id: str) -> dict[str, Any]:
        with self._lock:
            removed = self._documents.pop(str(document_id), None)
        if removed is None:
            return {"success": False, "message": f"Document {document_id} not found"}
        return {"success": True, "message": f"Deleted '{removed['title']}'"}

    def list_documents(self, limit: int = 20, **filters: Any) -> list[dict[str, Any]]:
        documents = [
            document
            for document in self._documents.values()
            if self._matches_filters(
                document,
                content_type=filters.get("content_type"),
                classification=filters.get("classification"),
                keywords=filters.get("keywords"),
                keywords_all=bool(filters.get("keywords_all", False)),
                tags=filters.get("tags"),
            )
        ]
        return [
            {
                "id": document["id"],
                "title": document["title"],
                "status": document["status"],
                "embeddings_count": document["embeddings_count"],
            }
            for document in documents[:limit]
        ]

    def document_status(self, document_id: str) -> dict[str, Any]:
        document = self._require(document_id)
        ready = document["status"] == "processed"
        return {
            "id": document["id"],
            "status": document["status"],
            "embeddings_count": document["embeddings_count"],
            "embeddings_ready": ready,
            "message": "Document processed successfully" if ready else "Document is still processing",
        }

    # Keywords

    def keyword_frequencies(self, limit: int = 100, min_count: int = 1) -> dict[str, int]:
        counts = Counter(k for document in self._documents.values() for k in document["keywords"])
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        frequent = [(keyword, count) for keyword, count in ranked if count >= min_count]
        return dict(frequent[:limit])

    def _update_keywords(
        self,
        document_id: str,
        update: Callable[[list[str]], list[str]],
    ) -> dict[str, Any]:
        document = self._documents.get(str(document_id))
        if document is None:
            return {"success": False, "message": f"Document {document_id} not found"}
        document["keywords"] = _dedupe(update(list(document["keywords"])))
        return {"success": True, "keywords": list(document["keywords"])}

    def add_keywords_to_document(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        return self._update_keywords(document_id, lambda current: current + list(keywords))

    def remove_keywords_from_document(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        removed = set(keywords)
        return self._update_keywords(document_id, lambda current: [k for k in current if k not in removed])

    def set_document_keywords(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        return self._update_keywords(document_id, lambda _current: list(keywords))

    def keyword_statistics(self) -> dict[str, Any]:
        counts = Counter(k for document in self._documents.values() for k in document["keywords"])
        with_keywords = [d for d in self._documents.values() if d["keywords"]]
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return {
            "total_keywords": len(counts),
            "documents_with_keywords": len(with_keywords),
            "avg_keywords_per_document": (
                sum(len(d["keywords"]) for d in with_keywords) / len(with_keywords) if with_keywords else 0.0
            ),
            "top_keywords": [[keyword, count] for keyword, count in ranked[:10]],
            "singleton_keywords": sum(1 for count in counts.values() if count == 1),
        }

    # System

    def stats(self) -> dict[str, Any]:
        documents = list(self._documents.values())
        return {
            "total_documents": len(documents),
            "total_embeddings": sum(d["embeddings_count"] for d in documents),
            "storage_type": "memory",
            "by_status": dict(Counter(d["status"] for d in documents)),
            "by_type": dict(Counter(d["document_type"] for d in documents)),
        }

    def healthy(self) -> bool:
        return True

    # Search analytics

    def _searches_since(self, days: int) -> list[dict[str, Any]]:
        cutoff = self._now() - timedelta(days=days)
        return [s for s in self._search_log if datetime.fromisoformat(s["created_at"]) >= cutoff]

    def search_analytics(self, days: int = 30) -> dict[str, Any]:
        searches = self._searches_since(days)
        total = len(searches)
        return {
            "total_searches": total,
            "unique_queries": len({s["query"] for s in searches}),
            "avg_results_per_search": round(sum(s["results_count"] for s in searches) / total, 2) if total else 0.0,
            "avg_execution_time": round(sum(s["execution_time_ms"] for s in searches) / total, 2) if total else 0.0,
            "search_types": dict(Counter(s["search_type"] for s in searches)),
            "searches_with_results": sum(1 for s in searches if s["results_count"] > 0),
            "avg_click_through_rate": 0.0,
        }

    def search_history(
        self,
        limit: int = 20,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        searches = [
            s
            for s in reversed(self._search_log)
            if (user_id is None or s["user_id"] == user_id)
            and (session_id is None or s["session_id"] == session_id)
        ]
        return [dict(s) for s in searches[:limit]]

    def trending_queries(self, limit: int = 10, days: int = 7) -> list[dict[str, Any]]:
        grouped: dict[str, list[int]] = {}
        for search in self._searches_since(days):
            grouped.setdefault(search["query"], []).append(search["results_count"])
        ranked = sorted(grouped.items(), key=lambda item: (-len(item[1]), item[0]))
        return [
            {"query": query, "count": len(counts), "avg_results": sum(counts) / len(counts)}
            for query, counts in ranked[:limit]
        ]

    def cleanup_searches(self, days: int = 30, dry_run: bool = True) -> dict[str, Any]:
        cutoff = self._now() - timedelta(days=days)
        unused = [
            s
            for s in self._search_log
            if datetime.fromisoformat(s["created_at"]) < cutoff and s["results_count"] == 0
        ]
        if not dry_run:
            self._search_log = [s for s in self._search_log if s not in unused]
            logger.info(f"Removed {len(unused)} unused searches older than {days} days")
        return {"orphaned_count": 0, "unused_count": len(unused)}
