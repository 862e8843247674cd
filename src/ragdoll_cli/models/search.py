"""Pydantic models for search requests, results and diagnostics."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SearchType(str, Enum):
    """Retrieval strategies understood by the backend."""

    SEMANTIC = "semantic"
    HYBRID = "hybrid"
    FULLTEXT = "fulltext"
    KEYWORD = "keyword"


class SearchRequest(BaseModel):
    """Canonical search request built from raw CLI options.

    Built once per invocation by the normalizer and never mutated afterwards.
    Absent optional fields are left to the backend's defaults.
    """

    query: str = Field(min_length=1, description="Search query text")
    search_type: SearchType = Field(default=SearchType.SEMANTIC)
    limit: int = Field(default=10, gt=0, description="Maximum number of results")
    threshold: Optional[float] = Field(
        default=None,
        description="Similarity cutoff; not clamped, the backend decides how to treat it",
    )
    content_type: Optional[str] = Field(default=None)
    classification: Optional[str] = Field(default=None)
    keywords: Optional[tuple[str, ...]] = Field(
        default=None,
        description="Keyword filter; None when no usable keyword was given",
    )
    keywords_all: bool = Field(default=False, description="AND semantics over keywords")
    tags: Optional[tuple[str, ...]] = Field(default=None)
    semantic_weight: Optional[float] = Field(default=None)
    text_weight: Optional[float] = Field(default=None)
    session_id: Optional[str] = Field(default=None)
    user_id: Optional[str] = Field(default=None)
    track_search: bool = Field(default=True)

    model_config = {"frozen": True}

    @property
    def threshold_out_of_range(self) -> bool:
        """True when a threshold was given outside [0.0, 1.0]."""
        return self.threshold is not None and not (0.0 <= self.threshold <= 1.0)


class SearchResult(BaseModel):
    """Uniform projection of one backend result entry."""

    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    score: Optional[float] = None
    keywords: tuple[str, ...] = ()

    model_config = {"frozen": True}


class SearchStatistics(BaseModel):
    """Similarity statistics optionally reported alongside a search response."""

    threshold_used: Optional[float] = None
    highest_similarity: Optional[float] = None
    lowest_similarity: Optional[float] = None
    average_similarity: Optional[float] = None
    similarities_above_threshold: Optional[int] = None
    total_embeddings_checked: Optional[int] = None

    model_config = {"frozen": True}


class DiagnosticCondition(str, Enum):
    """Why a search came back empty."""

    NO_STATISTICS = "no_statistics"
    BELOW_THRESHOLD = "below_threshold"
    PROCESSING_INCONSISTENCY = "processing_inconsistency"
    NO_MATCHES = "no_matches"


class DiagnosticReport(BaseModel):
    """Guidance derived from an empty search response. Never persisted."""

    condition: DiagnosticCondition
    suggested_threshold: Optional[float] = None
    guidance: list[str] = Field(
        default_factory=list,
        description="Suggestion lines, most actionable first",
    )
    statistics: Optional[SearchStatistics] = None

    model_config = {"frozen": True}


class KeywordMode(BaseModel):
    """Resolved keyword-only search: which backend operation and with what keywords."""

    method_name: str
    keywords: tuple[str, ...]

    model_config = {"frozen": True}

    @property
    def match_all(self) -> bool:
        return self.method_name == "search_by_keywords_all"

    @property
    def label(self) -> str:
        return "ALL keywords (AND)" if self.match_all else "ANY keywords (OR)"
