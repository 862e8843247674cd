"""Backend client interface for the Ragdoll retrieval and document store.

The CLI never talks to storage or embedding code directly. Everything goes
through a BackendClient, whose responses are loosely-typed mappings and lists
read defensively by the search core.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BackendError(Exception):
    """A retrieval or document-store call failed or returned an error indicator."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendClient(ABC):
    """Abstract interface for Ragdoll backends.

    Implementations raise BackendError for failed calls. Document mutations
    return a mapping with at least `success` and optionally `message`.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return backend identifier (e.g., 'http', 'fake')."""
        pass

    # Retrieval

    @abstractmethod
    def search(self, query: str, **filters: Any) -> Any:
        """Semantic search. Returns {results, statistics?, total_results?, execution_time_ms?}."""
        pass

    @abstractmethod
    def hybrid_search(self, query: str, **filters: Any) -> Any:
        """Semantic + full-text search; results carry combined_score/weighted_score."""
        pass

    @abstractmethod
    def fulltext_search(self, query: str, **filters: Any) -> Any:
        """Lexical search; results carry fulltext_similarity."""
        pass

    @abstractmethod
    def search_by_keywords(self, keywords: list[str], limit: int = 20) -> Any:
        """Documents carrying ANY of the keywords."""
        pass

    @abstractmethod
    def search_by_keywords_all(self, keywords: list[str], limit: int = 20) -> Any:
        """Documents carrying ALL of the keywords."""
        pass

    @abstractmethod
    def get_context(self, query: str, limit: int = 5) -> Any:
        pass

    @abstractmethod
    def enhance_prompt(self, prompt: str, context_limit: int = 5) -> Any:
        pass

    # Documents

    @abstractmethod
    def add_document(self, path: str, **options: Any) -> dict[str, Any]:
        pass

    @abstractmethod
    def get_document(self, document_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    def update_document(self, document_id: str, **changes: Any) -> dict[str, Any]:
        pass

    @abstractmethod
    def delete_document(self, document_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    def list_documents(self, limit: int = 20, **filters: Any) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def document_status(self, document_id: str) -> dict[str, Any]:
        pass

    # Keywords

    @abstractmethod
    def keyword_frequencies(self, limit: int = 100, min_count: int = 1) -> dict[str, int]:
        pass

    @abstractmethod
    def add_keywords_to_document(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        pass

    @abstractmethod
    def remove_keywords_from_document(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        pass

    @abstractmethod
    def set_document_keywords(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        pass

    @abstractmethod
    def keyword_statistics(self) -> dict[str, Any]:
        pass

    # System

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        pass

    @abstractmethod
    def healthy(self) -> bool:
        """Health probe; returns False instead of raising."""
        pass

    # Search analytics

    @abstractmethod
    def search_analytics(self, days: int = 30) -> dict[str, Any]:
        pass

    @abstractmethod
    def search_history(
        self,
        limit: int = 20,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def trending_queries(self, limit: int = 10, days: int = 7) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def cleanup_searches(self, days: int = 30, dry_run: bool = True) -> dict[str, Any]:
        pass


def empty_search_analytics() -> dict[str, Any]:
    """Analytics payload for a backend that has not recorded any searches."""
    return {
        "total_searches": 0,
        "unique_queries": 0,
        "avg_results_per_search": 0.0,
        "avg_execution_time": 0.0,
        "search_types": {},
        "searches_with_results": 0,
        "avg_click_through_rate": 0.0,
    }
