"""
Base classes for schemas.

A schema is a plugin that knows how to log a user in (login-schema) and/or
how to recognize an already logged-in user (auth-schema). Both kinds do the
same thing: read what they need from `req`, then set `req.user` on success
or `req.unauthorized_error` on failure. A schema must never finalize `res`.

Subclassing is optional. The registry accepts any object that has the
right methods, but these classes document the contract.

Example:
    class PasswordSchema(LoginSchema):
        name = "password"

        async def knock_login(self, req, res):
            user = await self.users.check(req.body["email"], req.body["password"])
            if user is None:
                req.unauthorized_error = UnauthorizedError("bad credentials", self)
            return user
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Schema:
    """Anything with a name that can be registered."""

    name: str | None = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


class LoginSchema(Schema, ABC):
    """
    Authenticates a user and establishes a session marker.

    Optional hooks: `login`, `login_response`, `oauth_login`, `oauth_callback`.
    """

    @abstractmethod
    async def knock_login(self, req: Any, res: Any) -> Any:
        """
        Authenticate the request.

        Return the user (or set `req.user`) on success, set
        `req.unauthorized_error` otherwise.
        """


class AuthSchema(Schema, ABC):
    """
    Validates an existing session marker.

    Optional hooks: `create`, `auth`, `auth_response`, `revoke`.
    `create` is called after a successful login to mint the marker.
    """

    @abstractmethod
    async def knock_auth(self, req: Any, res: Any) -> Any:
        """
        Authorize the request.

        Return the user (or set `req.user`) on success, set
        `req.unauthorized_error` otherwise.
        """
