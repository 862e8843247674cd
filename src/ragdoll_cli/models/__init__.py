"""Pydantic models for Ragdoll CLI."""

from .documents import AddOutcome, AddStatus, EnrichmentOutcome
from .search import (
    DiagnosticCondition,
    DiagnosticReport,
    KeywordMode,
    SearchRequest,
    SearchResult,
    SearchStatistics,
    SearchType,
)

__all__ = [
    # Search
    "SearchType",
    "SearchRequest",
    "SearchResult",
    "SearchStatistics",
    "KeywordMode",
    # Diagnostics
    "DiagnosticCondition",
    "DiagnosticReport",
    # Documents
    "AddStatus",
    "AddOutcome",
    "EnrichmentOutcome",
]
