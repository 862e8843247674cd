"""HTTP client for a Ragdoll server."""

import logging
from pathlib import Path
from typing import Any, Optional

import requests

from ..config import BackendConfig
from .client import BackendClient, BackendError, empty_search_analytics

logger = logging.getLogger(__name__)


class HttpBackendClient(BackendClient):
    """JSON-over-HTTP client for the Ragdoll server API.

    Each backend operation maps to one endpoint under the configured base URL.
    Transport failures and non-2xx responses raise BackendError; nothing is
    retried here.
    """

    def __init__(self, config: BackendConfig, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            config: Backend section of the CLI configuration
            session: Optional requests session (a new one is created if omitted)
        """
        self.base_url = config.url.rstrip("/")
        self.timeout = config.timeout_seconds
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if config.api_key:
            self.session.headers.update({"Authorization": f"Bearer {config.api_key}"})

    @property
    def backend_name(self) -> str:
        return "http"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise BackendError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise BackendError(self._error_message(response), status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from {url}: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("message")
            if message:
                return str(message)
        text = response.text.strip()
        return text[:200] if text else f"HTTP {response.status_code}"

    # Retrieval

    def search(self, query: str, **filters: Any) -> Any:
        return self._request("POST", "/search", json={"query": query, **filters})

    def hybrid_search(self, query: str, **filters: Any) -> Any:
        return self._request("POST", "/search/hybrid", json={"query": query, **filters})

    def fulltext_search(self, query: str, **filters: Any) -> Any:
        return self._request("POST", "/search/fulltext", json={"query": query, **filters})

    def search_by_keywords(self, keywords: list[str], limit: int = 20) -> Any:
        return self._request(
            "POST",
            "/search/keywords",
            json={"keywords": keywords, "limit": limit, "mode": "any"},
        )

    def search_by_keywords_all(self, keywords: list[str], limit: int = 20) -> Any:
        return self._request(
            "POST",
            "/search/keywords",
            json={"keywords": keywords, "limit": limit, "mode": "all"},
        )

    def get_context(self, query: str, limit: int = 5) -> Any:
        return self._request("POST", "/context", json={"query": query, "limit": limit})

    def enhance_prompt(self, prompt: str, context_limit: int = 5) -> Any:
        return self._request(
            "POST",
            "/enhance",
            json={"prompt": prompt, "context_limit": context_limit},
        )

    # Documents

    def add_document(self, path: str, **options: Any) -> dict[str, Any]:
        file_path = Path(path)
        try:
            with open(file_path, "rb") as f:
                return self._request(
                    "POST",
                    "/documents",
                    files={"file": (file_path.name, f)},
                    data={key: str(value) for key, value in options.items()},
                )
        except OSError as e:
            raise BackendError(f"Could not read {file_path}: {e}") from e

    def get_document(self, document_id: str) -> dict[str, Any]:
        return self._request("GET", f"/documents/{document_id}")

    def update_document(self, document_id: str, **changes: Any) -> dict[str, Any]:
        return self._request("PATCH", f"/documents/{document_id}", json=changes)

    def delete_document(self, document_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/documents/{document_id}")

    def list_documents(self, limit: int = 20, **filters: Any) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": limit}
        for key, value in filters.items():
            params[key] = ",".join(value) if isinstance(value, list) else value
        data = self._request("GET", "/documents", params=params)
        if isinstance(data, dict):
            data = data.get("documents", [])
        return data if isinstance(data, list) else []

    def document_status(self, document_id: str) -> dict[str, Any]:
        return self._request("GET", f"/documents/{document_id}/status")

    # Keywords

    def keyword_frequencies(self, limit: int = 100, min_count: int = 1) -> dict[str, int]:
        data = self._request("GET", "/keywords", params={"limit": limit, "min_count": min_count})
        return data if isinstance(data, dict) else {}

    def add_keywords_to_document(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        return self._request("POST", f"/documents/{document_id}/keywords", json={"keywords": keywords})

    def remove_keywords_from_document(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        return self._request("DELETE", f"/documents/{document_id}/keywords", json={"keywords": keywords})

    def set_document_keywords(self, document_id: str, keywords: list[str]) -> dict[str, Any]:
        return self._request("PUT", f"/documents/{document_id}/keywords", json={"keywords": keywords})

    def keyword_statistics(self) -> dict[str, Any]:
        return self._request("GET", "/keywords/stats")

    # System

    def stats(self) -> dict[str, Any]:
        return self._request("GET", "/stats")

    def healthy(self) -> bool:
        try:
            data = self._request("GET", "/health")
        except BackendError as e:
            logger.warning(f"Health check failed: {e}")
            return False
        if isinstance(data, dict) and "healthy" in data:
            return bool(data["healthy"])
        return True

    # Search analytics

    def _analytics_request(self, path: str, fallback: Any, **kwargs: Any) -> Any:
        try:
            return self._request("GET", path, **kwargs)
        except BackendError as e:
            if e.status_code != 404:
                raise
            logger.debug(f"Analytics endpoint {path} not available on this server")
            return fallback

    def search_analytics(self, days: int = 30) -> dict[str, Any]:
        return self._analytics_request(
            "/analytics/overview",
            empty_search_analytics(),
            params={"days": days},
        )

    def search_history(
        self,
        limit: int = 20,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": limit}
        if user_id:
            params["user_id"] = user_id
        if session_id:
            params["session_id"] = session_id
        return self._analytics_request("/analytics/history", [], params=params)

    def trending_queries(self, limit: int = 10, days: int = 7) -> list[dict[str, Any]]:
        return self._analytics_request(
            "/analytics/trending",
            [],
            params={"limit": limit, "days": days},
        )

    def cleanup_searches(self, days: int = 30, dry_run: bool = True) -> dict[str, Any]:
        try:
            return self._request(
                "POST",
                "/analytics/cleanup",
                json={"days": days, "dry_run": dry_run},
            )
        except BackendError as e:
            if e.status_code != 404:
                raise
            return {"orphaned_count": 0, "unused_count": 0}
