"""Diagnostics for searches that come back empty.

Uses the similarity statistics a backend may attach to its response to
explain the empty result and suggest a concrete next step.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..models.search import DiagnosticCondition, DiagnosticReport, SearchStatistics
from .fields import as_float, as_int, lookup

logger = logging.getLogger(__name__)

# Suggested threshold sits just below the best observed similarity.
THRESHOLD_RELAXATION = 0.9
# Below this best similarity, exact keyword matching is the better tool.
LOW_SIMILARITY_CUTOFF = 0.3

LOWER_THRESHOLD_GUIDANCE = "Try lowering the similarity threshold with --threshold"
KEYWORD_FALLBACK_GUIDANCE = (
    "Similarity scores are very low for this query. "
    "Try a keyword search instead: ragdoll keywords search KEYWORD [KEYWORD2...]"
)
NO_MATCHES_GUIDANCE = (
    "No similar content found. Try adjusting your search terms "
    "or check if documents have been processed."
)

_FLOAT_FIELDS = ("threshold_used", "highest_similarity", "lowest_similarity", "average_similarity")
_INT_FIELDS = ("similarities_above_threshold", "total_embeddings_checked")


def extract_statistics(raw_response: Any) -> Optional[SearchStatistics]:
    """Similarity statistics from a response, or None when absent or unusable."""
    if isinstance(raw_response, (list, tuple)):
        return None
    raw_stats = lookup(raw_response, "statistics")
    if raw_stats is None:
        return None

    values: dict[str, Any] = {}
    for name in _FLOAT_FIELDS:
        values[name] = as_float(lookup(raw_stats, name))
    for name in _INT_FIELDS:
        values[name] = as_int(lookup(raw_stats, name))

    if all(value is None for value in values.values()):
        logger.debug("Search statistics present but carried no usable values")
        return None
    return SearchStatistics(**values)


def suggest_threshold(highest_similarity: float) -> float:
    return round(highest_similarity * THRESHOLD_RELAXATION, 3)


def diagnose(raw_response: Any) -> DiagnosticReport:
    """Explain an empty result set.

    Only called once projection yielded no results. Never raises: missing
    or malformed statistics degrade to generic guidance.
    """
    statistics = extract_statistics(raw_response)
    if statistics is None:
        return DiagnosticReport(
            condition=DiagnosticCondition.NO_STATISTICS,
            guidance=[LOWER_THRESHOLD_GUIDANCE],
        )

    highest = statistics.highest_similarity
    threshold = statistics.threshold_used
    above = statistics.similarities_above_threshold or 0

    guidance: list[str] = []
    suggested: Optional[float] = None

    if highest is not None and threshold is not None and highest < threshold:
        condition = DiagnosticCondition.BELOW_THRESHOLD
        suggested = suggest_threshold(highest)
        guidance.append(
            f"Best match scored {highest:.3f}, below the threshold of {threshold:.3f}. "
            f"Try --threshold {suggested}"
        )
    elif above > 0:
        condition = DiagnosticCondition.PROCESSING_INCONSISTENCY
        guidance.append(
            f"Result-processing inconsistency: the backend reported {above} "
            "similarities above the threshold but returned no results. "
            "This is a mismatch between the backend response and result extraction, "
            "not an empty match set."
        )
    else:
        condition = DiagnosticCondition.NO_MATCHES
        guidance.append(NO_MATCHES_GUIDANCE)

    if (
        condition != DiagnosticCondition.PROCESSING_INCONSISTENCY
        and highest is not None
        and highest < LOW_SIMILARITY_CUTOFF
    ):
        guidance.append(KEYWORD_FALLBACK_GUIDANCE)

    return DiagnosticReport(
        condition=condition,
        suggested_threshold=suggested,
        guidance=guidance,
        statistics=statistics,
    )
