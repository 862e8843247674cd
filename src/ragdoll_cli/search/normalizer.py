from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from ..models.search import SearchRequest, SearchType
from .errors import InvalidRequest

logger = logging.getLogger(__name__)

VALID_SEARCH_TYPES = tuple(t.value for t in SearchType)
DEFAULT_LIMIT = 10

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def split_list_flag(value: Any) -> Optional[tuple[str, ...]]:
    """Split a comma-separated flag into trimmed, non-empty tokens.

    Order and duplicates are preserved. Returns None (not an empty tuple)
    when nothing usable is left so callers skip the filter entirely.
    """
    if value is None:
        return None
    if isinstance(value, str):
        pieces: Iterable[str] = value.split(",")
    elif isinstance(value, (list, tuple)):
        pieces = [part for item in value if item is not None for part in str(item).split(",")]
    else:
        raise InvalidRequest(f"Expected a comma-separated list, got {type(value).__name__}")

    tokens = tuple(piece.strip() for piece in pieces if piece.strip())
    return tokens or None


def parse_int_flag(value: Any, *, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidRequest(f"--{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidRequest(f"--{name} must be an integer, got {value!r}")


def parse_float_flag(value: Any, *, name: str) -> float:
    """Parse a numeric flag; NaN and infinities are rejected."""
    if isinstance(value, bool):
        raise InvalidRequest(f"--{name} must be a number")
    number: Optional[float] = None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            pass
    if number is None or not math.isfinite(number):
        raise InvalidRequest(f"--{name} must be a finite number, got {value!r}")
    return number


def parse_bool_flag(value: Any, *, name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise InvalidRequest(f"--{name} must be true or false, got {value!r}")


def parse_positive_int(value: Any, *, name: str, default: int) -> int:
    """Parse a count-like flag (limit, days); must be > 0."""
    if value is None:
        return default
    parsed = parse_int_flag(value, name=name)
    if parsed <= 0:
        raise InvalidRequest(f"--{name} must be greater than 0, got {parsed}")
    return parsed


def _optional_float(raw: Mapping[str, Any], key: str) -> Optional[float]:
    value = raw.get(key)
    if value is None or value == "":
        return None
    return parse_float_flag(value, name=key.replace("_", "-"))


def _optional_str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _resolve_search_type(raw_type: Any, *, query: str, keywords: Optional[tuple[str, ...]]) -> SearchType:
    if raw_type is None or raw_type == "":
        # Keywords with no query text means a keyword-only search.
        if not query and keywords:
            return SearchType.KEYWORD
        return SearchType.SEMANTIC

    value = raw_type.value if isinstance(raw_type, SearchType) else raw_type
    if value not in VALID_SEARCH_TYPES:
        raise InvalidRequest(
            f"Invalid search type '{value}'. Must be one of: {', '.join(VALID_SEARCH_TYPES)}"
        )
    return SearchType(value)


def normalize_search_request(raw: Mapping[str, Any]) -> SearchRequest:
    """Build a canonical SearchRequest from raw option flags.

    Args:
        raw: Option mapping as produced by the CLI layer. Values may be strings,
            numbers or booleans; keyword and tag flags may be comma-separated.

    Returns:
        Validated, immutable SearchRequest

    Raises:
        InvalidRequest: If the query is empty, a numeric flag cannot be parsed,
            the limit is not positive or the search type is unknown
    """
    query_value = raw.get("query")
    query = "" if query_value is None else str(query_value).strip()

    keywords = split_list_flag(raw.get("keywords"))
    tags = split_list_flag(raw.get("tags"))

    search_type = _resolve_search_type(raw.get("search_type"), query=query, keywords=keywords)

    if search_type == SearchType.KEYWORD:
        if not keywords:
            raise InvalidRequest("Keyword search requires at least one keyword")
        if not query:
            query = " ".join(keywords)

    if not query:
        raise InvalidRequest("Search query must not be empty")

    limit = parse_positive_int(raw.get("limit"), name="limit", default=DEFAULT_LIMIT)
    threshold = _optional_float(raw, "threshold")

    try:
        request = SearchRequest(
            query=query,
            search_type=search_type,
            limit=limit,
            threshold=threshold,
            content_type=_optional_str(raw, "content_type"),
            classification=_optional_str(raw, "classification"),
            keywords=keywords,
            keywords_all=parse_bool_flag(raw.get("keywords_all"), name="keywords-all", default=False),
            tags=tags,
            semantic_weight=_optional_float(raw, "semantic_weight"),
            text_weight=_optional_float(raw, "text_weight"),
            session_id=_optional_str(raw, "session_id"),
            user_id=_optional_str(raw, "user_id"),
            track_search=parse_bool_flag(raw.get("track_search"), name="track-search", default=True),
        )
    except ValidationError as e:
        raise InvalidRequest(str(e)) from e

    if request.threshold_out_of_range:
        logger.debug(f"Threshold {request.threshold} is outside [0, 1]; passing it through unchanged")

    return request
