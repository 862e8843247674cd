"""Query dispatch and empty-result diagnostics."""

from .diagnostics import diagnose, extract_statistics
from .engine import SearchOutcome, run_search
from .errors import InvalidRequest
from .keywords import keyword_filter_params, keyword_mode_for, resolve_keyword_mode
from .normalizer import normalize_search_request
from .projector import project
from .strategy import dispatch

__all__ = [
    "InvalidRequest",
    "SearchOutcome",
    "diagnose",
    "dispatch",
    "extract_statistics",
    "keyword_filter_params",
    "keyword_mode_for",
    "normalize_search_request",
    "project",
    "resolve_keyword_mode",
    "run_search",
]
