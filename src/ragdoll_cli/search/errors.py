"""Errors raised while turning user input into a search request."""


class InvalidRequest(ValueError):
    """Malformed user input: empty query, unparseable number, unknown search type.

    Raised before any backend call is attempted.
    """
    pass
