"""
Request and response carriers.

The dispatcher doesn't care which web framework it runs under. It only needs
a request exposing four key-value sources plus two writable outcome fields,
and a response that can say whether it was already sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class RequestCarrier(Protocol):
    """Structural contract for requests."""

    params: Mapping[str, Any]
    query: Mapping[str, Any]
    cookies: Mapping[str, Any]
    body: Mapping[str, Any]

    user: Any
    unauthorized_error: Any


@runtime_checkable
class ResponseCarrier(Protocol):
    """Structural contract for responses."""

    @property
    def headers_sent(self) -> bool: ...


@dataclass
class SimpleRequest:
    """Plain request carrier, filled in by a framework adapter or a test."""

    params: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    cookies: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)

    # Outcome
    user: Any = None
    unauthorized_error: Any = None

    # Extra context for schemas (headers, client address, ...)
    state: dict[str, Any] = field(default_factory=dict)


@dataclass
class SimpleResponse:
    """Plain response carrier."""

    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    content: Any = None
    headers_sent: bool = False

    def set_cookie(self, key: str, value: str) -> None:
        self.cookies[key] = value

    def end(self, content: Any = None, status_code: int | None = None) -> None:
        """Finalize the response. Schemas must not call this."""
        if status_code is not None:
            self.status_code = status_code
        self.content = content
        self.headers_sent = True


# =============================================================================
# Parameter Extraction
# =============================================================================


PARAM_SOURCES = ("params", "query", "cookies", "body")


def get_param(req: Any, key: str) -> Any:
    """
    Get a named value from the request.

    Looks in path params, then query, then cookies, then body, and returns
    the first value that is not None. Missing sources count as empty.
    """
    for source in PARAM_SOURCES:
        values = getattr(req, source, None)
        if not values:
            continue
        value = values.get(key)
        if value is not None:
            return value
    return None
