"""
FastAPI integration.

Turns a KnockKnock middleware into a FastAPI dependency:

    knock = KnockKnock()
    knock.enable("password", PasswordSchema(), set_default=True)

    @app.post("/login")
    async def login(carrier: SimpleRequest = Depends(knock_dependency(knock, "knock_login"))):
        return {"user": carrier.user}

Forwarded failures become HTTPException(401). With
`throw_unauthorized_error` off the route still runs, and can inspect
`carrier.unauthorized_error` itself.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from fastapi import HTTPException, Request, Response

from knockknock.config import get_settings
from knockknock.core.carrier import SimpleRequest
from knockknock.core.errors import UnauthorizedError
from knockknock.dispatcher import KnockKnock

logger = logging.getLogger(__name__)


# =============================================================================
# Carriers
# =============================================================================


class KnockResponse:
    """
    Response carrier around the FastAPI `Response` of the dependency.

    Schemas can set cookies and headers through `response`; the dispatcher
    only checks `headers_sent`, which stays False unless something calls
    `end()`.
    """

    def __init__(self, response: Response):
        self.response = response
        self.headers_sent = False

    def set_cookie(self, key: str, value: str, **kwargs: Any) -> None:
        self.response.set_cookie(key, value, **kwargs)

    def delete_cookie(self, key: str, **kwargs: Any) -> None:
        self.response.delete_cookie(key, **kwargs)

    def end(self, *args: Any, **kwargs: Any) -> None:
        self.headers_sent = True


async def _read_body(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.debug("Ignoring malformed JSON body")
            return {}
        return data if isinstance(data, dict) else {}

    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        return dict(form)

    return {}


async def request_carrier(request: Request) -> SimpleRequest:
    """Build a request carrier from a FastAPI request."""
    return SimpleRequest(
        params=dict(request.path_params),
        query=dict(request.query_params),
        cookies=dict(request.cookies),
        body=await _read_body(request),
        state={
            "headers": dict(request.headers),
            "client": request.client.host if request.client else None,
            "request": request,
        },
    )


# =============================================================================
# Dependency
# =============================================================================


def knock_dependency(
    knock: KnockKnock,
    method: str,
    schema_name: str | None = None,
    status_code: int | None = None,
) -> Callable:
    """
    Create a FastAPI dependency running `knock`'s `method` middleware.

    Args:
        knock: The dispatcher.
        method: Middleware name ("knock_login", "knock_auth", "revoke", ...).
        schema_name: Always use this schema instead of letting the request
            pick one.
        status_code: Status for forwarded failures (default from settings,
            401).

    Returns:
        A dependency resolving to the request carrier (`.user` set on
        success).
    """
    middleware = knock.middleware(method, schema_name)
    failure_status = status_code or get_settings().unauthorized_status_code

    async def dependency(request: Request, response: Response) -> SimpleRequest:
        req = await request_carrier(request)
        res = KnockResponse(response)
        forwarded: list[Any] = []

        def forward(error: Any = None) -> None:
            forwarded.append(error)

        await middleware(req, res, forward)

        error = forwarded[-1] if forwarded else None
        if error is not None:
            detail = error.message if isinstance(error, UnauthorizedError) else str(error)
            raise HTTPException(status_code=failure_status, detail=detail)

        # Make the outcome reachable from the route's own request too
        request.state.user = req.user
        request.state.unauthorized_error = req.unauthorized_error
        return req

    return dependency
