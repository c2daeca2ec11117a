"""
Execution engine - runs a schema's login or auth capability.

Both pipelines are strictly sequential for a request:

    login:  knock_login -> (companion auth schema).create -> login_response
            -> global login response
    auth:   knock_auth -> auth_response -> global auth response

The outcome is written onto the request (`req.user` or
`req.unauthorized_error`); classifying it is the middleware's job.
"""

from __future__ import annotations

import logging
from typing import Any

from knockknock.core.capabilities import (
    REQUIRED_METHODS,
    SELECTOR_PARAMS,
    SchemaType,
)
from knockknock.core.carrier import get_param
from knockknock.core.errors import ConfigurationError, UnauthorizedError
from knockknock.core.options import KnockKnockOptions
from knockknock.core.registry import SchemaEntry, SchemaRegistry
from knockknock.core.utils import is_scalar, maybe_await

logger = logging.getLogger(__name__)


def set_user(req: Any, user: Any) -> Any:
    """
    Store a schema's result as `req.user`.

    Falsy results leave the request alone. Plain values (a user id, a
    username) are wrapped as {"user": value}. Any other object, callables
    included, is stored as-is: only str, bytes and numbers count as plain.
    """
    if user:
        if is_scalar(user):
            user = {"user": user}
        req.user = user
    return user


def _ensure_not_sent(entry: SchemaEntry, res: Any) -> None:
    if getattr(res, "headers_sent", False):
        raise UnauthorizedError("don't end res in schema", entry.schema)


class ExecutionEngine:
    """Runs the login/auth pipelines against registered schemas."""

    def __init__(self, registry: SchemaRegistry, options: KnockKnockOptions):
        self.registry = registry
        self.options = options

    async def run(
        self,
        schema_type: SchemaType | str,
        entry: SchemaEntry,
        req: Any,
        res: Any,
    ) -> Any:
        """Run the pipeline for `schema_type`."""
        if SchemaType(schema_type) is SchemaType.LOGIN:
            return await self.login(entry, req, res)
        return await self.auth(entry, req, res)

    async def login(self, entry: SchemaEntry, req: Any, res: Any) -> Any:
        """
        Log the request in with `entry`'s schema.

        After a successful login the companion auth schema (named by the
        request's knockAuth param, or the default auth schema) gets a chance
        to create its session marker.

        Returns:
            The established user, or None.

        Raises:
            ConfigurationError: No login schema is registered.
            UnauthorizedError: The schema finalized the response.
        """
        if not self.registry.valid:
            raise ConfigurationError("no login schema is enabled")

        handler = entry.capabilities.handler(REQUIRED_METHODS[SchemaType.LOGIN])
        if handler is None:
            raise ConfigurationError(f"schema '{entry.name}' can't log users in")

        result = await maybe_await(handler.func(req, res))
        user = set_user(req, result or getattr(req, "user", None))
        _ensure_not_sent(entry, res)

        if user and not getattr(req, "unauthorized_error", None):
            await self._create_session(req, res)

        await self._respond(entry, "login_response", req, res)
        if self.options.global_login_response:
            await maybe_await(self.options.global_login_response(entry.schema, req, res))

        return user

    async def auth(self, entry: SchemaEntry, req: Any, res: Any) -> Any:
        """
        Authorize the request with `entry`'s schema.

        Returns:
            The established user, or None.

        Raises:
            UnauthorizedError: The schema finalized the response.
        """
        handler = entry.capabilities.handler(REQUIRED_METHODS[SchemaType.AUTH])
        if handler is None:
            raise ConfigurationError(f"schema '{entry.name}' can't authorize")

        result = await maybe_await(handler.func(req, res))
        user = set_user(req, result or getattr(req, "user", None))
        _ensure_not_sent(entry, res)

        await self._respond(entry, "auth_response", req, res)
        if self.options.global_auth_response:
            await maybe_await(self.options.global_auth_response(entry.schema, req, res))

        return user

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _create_session(self, req: Any, res: Any) -> None:
        auth_entry = self.registry.prefer_schema(
            get_param(req, SELECTOR_PARAMS[SchemaType.AUTH]),
            SchemaType.AUTH,
        )
        if auth_entry is None:
            logger.debug("No auth schema to create a session with")
            return

        create = auth_entry.capabilities.handler("create")
        if create is not None:
            logger.debug("Creating session with auth schema '%s'", auth_entry.name)
            await maybe_await(create.func(req, res))

    async def _respond(self, entry: SchemaEntry, hook: str, req: Any, res: Any) -> None:
        handler = entry.capabilities.handler(hook)
        if handler is not None:
            await maybe_await(handler.func(req, res))
