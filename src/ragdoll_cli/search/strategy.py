from __future__ import annotations

import logging
from typing import Any

from ..backend.client import BackendClient, BackendError
from ..models.search import SearchRequest, SearchType
from .fields import lookup
from .keywords import request_keyword_filters, resolve_keyword_mode

logger = logging.getLogger(__name__)

# Backend operation per text-scored strategy. Keyword search is resolved
# separately because its operation depends on AND/OR mode.
TEXT_OPERATIONS: dict[SearchType, str] = {
    SearchType.SEMANTIC: "search",
    SearchType.HYBRID: "hybrid_search",
    SearchType.FULLTEXT: "fulltext_search",
}

_OPTIONAL_FILTERS = ("threshold", "content_type", "classification", "session_id", "user_id")


def build_search_filters(request: SearchRequest) -> dict[str, Any]:
    """Backend filter parameters for a text-scored search.

    Only fields present on the request are sent; hybrid weights are added
    only for hybrid requests and passed through unmodified.
    """
    filters: dict[str, Any] = {"limit": request.limit}
    for name in _OPTIONAL_FILTERS:
        value = getattr(request, name)
        if value is not None:
            filters[name] = value
    filters.update(request_keyword_filters(request))
    filters["track_search"] = request.track_search

    if request.search_type == SearchType.HYBRID:
        if request.semantic_weight is not None:
            filters["semantic_weight"] = request.semantic_weight
        if request.text_weight is not None:
            filters["text_weight"] = request.text_weight
    return filters


def _raise_on_error_indicator(response: Any) -> None:
    if isinstance(response, (list, tuple)):
        return
    error = lookup(response, "error")
    if error:
        raise BackendError(str(error))


def dispatch(request: SearchRequest, backend: BackendClient) -> Any:
    """Invoke the one backend operation matching the request's search type.

    Returns:
        The raw backend response, untouched

    Raises:
        BackendError: If the backend call fails or reports an error; never retried
    """
    if request.search_type == SearchType.KEYWORD:
        mode = resolve_keyword_mode(request)
        logger.debug(f"Dispatching {mode.method_name} with {len(mode.keywords)} keyword(s)")
        operation = getattr(backend, mode.method_name)
        args: tuple[Any, ...] = (list(mode.keywords),)
        kwargs: dict[str, Any] = {"limit": request.limit}
    else:
        method_name = TEXT_OPERATIONS[request.search_type]
        logger.debug(f"Dispatching {method_name} for query {request.query!r}")
        operation = getattr(backend, method_name)
        args = (request.query,)
        kwargs = build_search_filters(request)

    try:
        response = operation(*args, **kwargs)
    except BackendError:
        raise
    except Exception as e:
        raise BackendError(f"{type(e).__name__}: {e}") from e

    _raise_on_error_indicator(response)
    return response
