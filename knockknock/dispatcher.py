"""
KnockKnock - the middleware factory.

This is the part route wiring talks to:

    knock = KnockKnock()
    knock.enable("password", PasswordSchema(), set_default=True)
    knock.enable("token", TokenSchema(), set_default=True)

    login_mw = knock.knock_login()          # default login schema
    auth_mw = knock.knock_auth("token")     # always the token schema
    await login_mw(req, res, next)

Every factory returns `async (req, res, next) -> None`. On success `next()`
is called with no argument and `req.user` is set. On failure
`req.unauthorized_error` is set and, unless `throw_unauthorized_error` is
off, `next(error)` is called with it.

Configuration errors (nothing registered, no default schema, a schema named
at wiring time that is missing or lacks the invoked method) raise
ConfigurationError straight out of the middleware. A schema the client names
through knockLogin/knockAuth that doesn't exist is a normal UnauthorizedError.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping

from knockknock.core.capabilities import (
    EXPOSED_METHODS,
    SELECTOR_PARAMS,
    MethodKind,
    SchemaType,
    owner_type,
)
from knockknock.core.carrier import get_param
from knockknock.core.engine import ExecutionEngine
from knockknock.core.errors import ConfigurationError, UnauthorizedError
from knockknock.core.options import KnockKnockOptions, normalize_options
from knockknock.core.registry import SchemaEntry, SchemaRegistry, get_registry
from knockknock.core.utils import maybe_await

logger = logging.getLogger(__name__)

Middleware = Callable[[Any, Any, Callable[..., Any]], Awaitable[None]]

MISSING_OUTCOME = (
    "must set req.user if login/auth success or set req.unauthorized_error otherwise"
)

# Original camelCase names, accepted by middleware()
_METHOD_ALIASES = {
    "knockLogin": "knock_login",
    "oauthLogin": "oauth_login",
    "oauthCallback": "oauth_callback",
    "knockAuth": "knock_auth",
}


class KnockKnock:
    """
    Pluggable login/auth dispatcher.

    At least one schema implementing `knock_login` must be enabled before any
    middleware runs. Without an explicit registry the module-level one from
    `get_registry()` is used, so schemas loaded with `load_schemas()` are seen.
    """

    def __init__(
        self,
        options: KnockKnockOptions | Mapping[str, Any] | None = None,
        registry: SchemaRegistry | None = None,
    ):
        self.registry = registry if registry is not None else get_registry()
        self.options = normalize_options(options)
        self.engine = ExecutionEngine(self.registry, self.options)

    # =========================================================================
    # Registry
    # =========================================================================

    def enable(
        self,
        name: str | None,
        schema: Any,
        set_default: bool = False,
        verify: Callable[..., Any] | None = None,
    ) -> SchemaEntry:
        """Enable a schema. See SchemaRegistry.enable."""
        return self.registry.enable(name, schema, set_default, verify)

    def disable(self, name: str) -> None:
        """Disable a schema."""
        self.registry.disable(name)

    @property
    def valid(self) -> bool:
        """Can the dispatcher work (is a login schema enabled)?"""
        return self.registry.valid

    # =========================================================================
    # Middleware Factories
    # =========================================================================

    def knock_login(self, schema_name: str | None = None) -> Middleware:
        """Log the request in (full pipeline with hooks)."""
        return self._middleware("knock_login", SchemaType.LOGIN, schema_name)

    def login(self, schema_name: str | None = None) -> Middleware:
        """The schema's `login` method."""
        return self._middleware("login", SchemaType.LOGIN, schema_name)

    def oauth_login(self, schema_name: str | None = None) -> Middleware:
        """Start an OAuth flow."""
        return self._middleware("oauth_login", SchemaType.LOGIN, schema_name)

    def oauth_callback(self, schema_name: str | None = None) -> Middleware:
        """Finish an OAuth flow."""
        return self._middleware("oauth_callback", SchemaType.LOGIN, schema_name)

    def knock_auth(self, schema_name: str | None = None) -> Middleware:
        """Authorize the request (full pipeline with hooks)."""
        return self._middleware("knock_auth", SchemaType.AUTH, schema_name)

    def auth(self, schema_name: str | None = None) -> Middleware:
        """The schema's `auth` method."""
        return self._middleware("auth", SchemaType.AUTH, schema_name)

    def revoke(self, schema_name: str | None = None) -> Middleware:
        """Revoke the session marker."""
        return self._middleware("revoke", SchemaType.AUTH, schema_name)

    def middleware(self, method: str, schema_name: str | None = None) -> Middleware:
        """
        Get a middleware by method name.

        Useful for table-driven route wiring. Accepts snake_case names and
        their camelCase spellings (e.g. "knockLogin").
        """
        method = _METHOD_ALIASES.get(method, method)
        try:
            schema_type = owner_type(method)
        except KeyError:
            exposed = [m for methods in EXPOSED_METHODS.values() for m in methods]
            raise ConfigurationError(
                f"Unknown method '{method}'. Supported: {exposed}"
            ) from None
        return self._middleware(method, schema_type, schema_name)

    # =========================================================================
    # Internal: build the request handler
    # =========================================================================

    def _middleware(
        self,
        method: str,
        schema_type: SchemaType,
        schema_name: str | None,
    ) -> Middleware:
        preset: SchemaEntry | None = None
        if schema_name:
            preset = self.registry.prefer_schema(schema_name, schema_type)

        async def middleware(req: Any, res: Any, next: Callable[..., Any]) -> None:
            entry = preset
            try:
                if not self.valid:
                    raise ConfigurationError("no login schema is enabled")

                if schema_name:
                    # Only ever the named schema; it may have been enabled
                    # after the factory was built
                    if entry is None:
                        entry = self.registry.prefer_schema(schema_name, schema_type)
                    if entry is None:
                        raise ConfigurationError(
                            f"no {schema_type.value} schema named '{schema_name}'"
                        )
                    chosen_by_request = False
                else:
                    requested = get_param(req, SELECTOR_PARAMS[schema_type])
                    entry = self.registry.prefer_schema(requested, schema_type)
                    chosen_by_request = bool(requested)
                    if entry is None and chosen_by_request:
                        raise UnauthorizedError(
                            f"unknown {schema_type.value} schema '{requested}'"
                        )
                    if entry is None:
                        raise ConfigurationError(
                            f"no default {schema_type.value} schema for '{method}'"
                        )

                handler = entry.capabilities.handler(method)
                if handler is None:
                    message = f"schema '{entry.name}' doesn't implement '{method}'"
                    if chosen_by_request:
                        raise UnauthorizedError(message, entry.schema)
                    raise ConfigurationError(message)

                if handler.kind is MethodKind.REQUIRED:
                    user = await self.engine.run(schema_type, entry, req, res)
                    user = user or getattr(req, "user", None)
                    if not user and not getattr(req, "unauthorized_error", None):
                        req.unauthorized_error = UnauthorizedError(
                            MISSING_OUTCOME, entry.schema
                        )
                else:
                    await maybe_await(handler.func(req, res))

                if getattr(req, "unauthorized_error", None):
                    raise req.unauthorized_error

            except ConfigurationError:
                raise
            except Exception as e:
                await self._fail(e, entry, req, next)
                return

            await maybe_await(next())

        middleware.__name__ = method
        middleware.__qualname__ = f"{type(self).__name__}.{method}.<middleware>"
        return middleware

    async def _fail(
        self,
        error: Exception,
        entry: SchemaEntry | None,
        req: Any,
        next: Callable[..., Any],
    ) -> None:
        schema = entry.schema if entry is not None else None

        if isinstance(error, UnauthorizedError):
            logger.info(
                "Unauthorized (schema=%s): %s",
                getattr(entry, "name", None),
                error.message,
            )
        else:
            logger.exception(
                "Internal error in schema '%s'", getattr(entry, "name", None)
            )
            error = UnauthorizedError("internal error", schema, error)
        req.unauthorized_error = error

        if self.options.throw_unauthorized_error:
            await maybe_await(next(error))
        else:
            await maybe_await(next())
