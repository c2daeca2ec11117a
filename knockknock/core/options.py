"""
Dispatcher options.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from knockknock.config import get_settings

# async def response(schema, req, res)
ResponseFunction = Callable[[Any, Any, Any], Union[Awaitable[Any], Any]]

# Accepted spellings of each option
_ALIASES = {
    "globalLoginResponse": "global_login_response",
    "globalAuthResponse": "global_auth_response",
    "throwUnauthorizedError": "throw_unauthorized_error",
}


class KnockKnockOptions(BaseModel):
    """
    How the dispatcher behaves after a schema has run.

    - global_login_response: called as (schema, req, res) after every
      successful login, whatever the schema
    - global_auth_response: same, after every successful auth
    - throw_unauthorized_error: forward failures to next(error). When False
      the failure is only left on req.unauthorized_error and next() is
      called without it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    global_login_response: Optional[Any] = None
    global_auth_response: Optional[Any] = None
    throw_unauthorized_error: bool = Field(
        default_factory=lambda: get_settings().throw_unauthorized_error
    )

    @field_validator("global_login_response", "global_auth_response")
    @classmethod
    def _callable_or_none(cls, value: Any) -> Optional[ResponseFunction]:
        return value if callable(value) else None

    @field_validator("throw_unauthorized_error", mode="before")
    @classmethod
    def _default_when_unset(cls, value: Any) -> Any:
        # Only a missing value falls back; an explicit False is honored
        if value is None:
            return get_settings().throw_unauthorized_error
        return value


def normalize_options(
    options: KnockKnockOptions | Mapping[str, Any] | None = None,
) -> KnockKnockOptions:
    """Build options from None, a model, or a dict (snake_case or camelCase keys)."""
    if options is None:
        return KnockKnockOptions()
    if isinstance(options, KnockKnockOptions):
        return options

    data = {_ALIASES.get(key, key): value for key, value in options.items()}
    return KnockKnockOptions(**data)
