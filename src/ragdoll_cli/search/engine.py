from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..backend.client import BackendClient
from ..models.search import DiagnosticReport, SearchRequest, SearchResult
from .diagnostics import diagnose
from .projector import project
from .strategy import dispatch


@dataclass(frozen=True)
class SearchOutcome:
    request: SearchRequest
    raw_response: Any
    results: list[SearchResult]
    diagnostics: Optional[DiagnosticReport]

    @property
    def empty(self) -> bool:
        return not self.results


def run_search(request: SearchRequest, backend: BackendClient) -> SearchOutcome:
    """Dispatch, project, and diagnose when nothing came back."""
    raw_response = dispatch(request, backend)
    results = project(raw_response, request)
    diagnostics = diagnose(raw_response) if not results else None
    return SearchOutcome(
        request=request,
        raw_response=raw_response,
        results=results,
        diagnostics=diagnostics,
    )
