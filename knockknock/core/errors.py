"""
Error types.

Two tiers:
- ConfigurationError: the dispatcher was wired wrong (bad registration,
  no login schema, schema missing the invoked method). Never translated.
- UnauthorizedError: a request failed to log in or authorize. Flows through
  the middleware's classification step.
"""

from __future__ import annotations

from typing import Any


class KnockKnockError(Exception):
    """Base class for knockknock errors that are not assertions."""
    pass


class ConfigurationError(AssertionError):
    """Raised when the dispatcher is misconfigured."""
    pass


class UnauthorizedError(Exception):
    """
    A request-level authorization failure.

    Carries the schema involved (for diagnostics) and, when it wraps an
    unexpected error, the original as `cause`.
    """

    def __init__(
        self,
        message: str,
        schema: Any = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.__dict__.update(message=message, schema=schema, cause=cause)
        if cause is not None:
            self.__cause__ = cause

    def __setattr__(self, key: str, value: Any) -> None:
        # Traceback bookkeeping still has to work
        if key.startswith("__"):
            super().__setattr__(key, value)
            return
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def schema_name(self) -> str | None:
        """Name of the schema that produced the failure, if known."""
        return getattr(self.schema, "name", None)

    def __repr__(self) -> str:
        return f"UnauthorizedError({self.message!r}, schema={self.schema_name!r})"
