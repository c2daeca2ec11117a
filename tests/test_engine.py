"""
Tests for the login/auth execution pipelines.
"""

import pytest

from knockknock import KnockKnockOptions, SimpleRequest, SimpleResponse
from knockknock.core.engine import ExecutionEngine, set_user
from knockknock.core.errors import ConfigurationError, UnauthorizedError
from knockknock.core.registry import SchemaRegistry

from sample_schemas import (
    AuthOnlySchema,
    PasswordSchema,
    RudeSchema,
    StaticSchema,
    TokenSchema,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry():
    registry = SchemaRegistry()
    registry.enable("password", PasswordSchema(), set_default=True)
    registry.enable("token", TokenSchema(), set_default=True)
    return registry


@pytest.fixture
def calls():
    return []


@pytest.fixture
def engine(registry, calls):
    async def global_login(schema, req, res):
        calls.append(("global_login", schema.name))

    def global_auth(schema, req, res):
        calls.append(("global_auth", schema.name))

    return ExecutionEngine(
        registry,
        KnockKnockOptions(
            global_login_response=global_login,
            global_auth_response=global_auth,
        ),
    )


def login_request(email="ada@example.com", password="secret", **kwargs):
    return SimpleRequest(body={"email": email, "password": password}, **kwargs)


# =============================================================================
# set_user
# =============================================================================


class TestSetUser:
    def test_object_stored_as_is(self):
        req = SimpleRequest()
        user = {"id": 1}
        assert set_user(req, user) is user
        assert req.user is user

    def test_scalar_is_wrapped(self):
        req = SimpleRequest()
        assert set_user(req, "ada") == {"user": "ada"}
        assert req.user == {"user": "ada"}

        set_user(req, 42)
        assert req.user == {"user": 42}

    def test_callable_stored_as_is(self):
        req = SimpleRequest()

        def user():
            return "ada"

        assert set_user(req, user) is user
        assert req.user is user

    def test_falsy_leaves_request_alone(self):
        req = SimpleRequest(user={"id": 1})
        assert set_user(req, None) is None
        assert req.user == {"id": 1}


# =============================================================================
# Login
# =============================================================================


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_runs_full_pipeline(self, engine, registry, calls):
        req, res = login_request(), SimpleResponse()
        password = registry.get("password")
        token = registry.get("token")

        user = await engine.login(registry.entry("password"), req, res)

        assert user == {"email": "ada@example.com"}
        assert req.user == user
        assert req.unauthorized_error is None
        # companion auth schema minted a session
        assert res.cookies == {"token": "tok-1"}
        assert token.sessions["tok-1"] == user
        assert password.responses == 1
        assert calls == [("global_login", "password")]

    @pytest.mark.asyncio
    async def test_failure_skips_session(self, engine, registry, calls):
        req, res = login_request(password="wrong"), SimpleResponse()

        user = await engine.login(registry.entry("password"), req, res)

        assert user is None
        assert isinstance(req.unauthorized_error, UnauthorizedError)
        assert res.cookies == {}
        # hooks still run, the middleware decides the outcome
        assert registry.get("password").responses == 1
        assert calls == [("global_login", "password")]

    @pytest.mark.asyncio
    async def test_companion_picked_by_request(self, engine, registry):
        other = TokenSchema()
        registry.enable("other-token", other)
        req, res = login_request(query={"knockAuth": "other-token"}), SimpleResponse()

        await engine.login(registry.entry("password"), req, res)

        assert "tok-1" in other.sessions
        assert registry.get("token").sessions == {}

    @pytest.mark.asyncio
    async def test_companion_without_create(self, engine, registry):
        registry.disable("token")
        registry.enable("auth-only", AuthOnlySchema(), set_default=True)
        req, res = login_request(), SimpleResponse()

        user = await engine.login(registry.entry("password"), req, res)
        assert user == {"email": "ada@example.com"}

    @pytest.mark.asyncio
    async def test_user_set_on_request_by_schema(self, engine, registry):
        class SetsRequest:
            name = "sets"

            async def knock_login(self, req, res):
                req.user = "ada"

        registry.enable("sets", SetsRequest())
        req = SimpleRequest()

        user = await engine.login(registry.entry("sets"), req, SimpleResponse())

        assert user == {"user": "ada"}
        assert req.user == {"user": "ada"}

    @pytest.mark.asyncio
    async def test_sync_schema(self, engine, registry):
        registry.enable("static", StaticSchema("static", "ada"))
        req = SimpleRequest()

        user = await engine.login(registry.entry("static"), req, SimpleResponse())
        assert user == {"user": "ada"}

    @pytest.mark.asyncio
    async def test_ending_response_fails(self, engine, registry):
        registry.enable("rude", RudeSchema())

        with pytest.raises(UnauthorizedError, match="don't end res in schema"):
            await engine.login(registry.entry("rude"), SimpleRequest(), SimpleResponse())

    @pytest.mark.asyncio
    async def test_requires_valid_registry(self, engine, registry):
        entry = registry.entry("password")
        registry.disable("password")

        with pytest.raises(ConfigurationError):
            await engine.login(entry, login_request(), SimpleResponse())


# =============================================================================
# Auth
# =============================================================================


class TestAuth:
    @pytest.mark.asyncio
    async def test_success(self, engine, registry, calls):
        token = registry.get("token")
        token.sessions["abc"] = {"email": "ada@example.com"}
        req = SimpleRequest(cookies={"token": "abc"})

        user = await engine.auth(registry.entry("token"), req, SimpleResponse())

        assert user == {"email": "ada@example.com"}
        assert req.state["authorized_by"] == "token"
        assert calls == [("global_auth", "token")]

    @pytest.mark.asyncio
    async def test_invalid_token(self, engine, registry):
        req = SimpleRequest(cookies={"token": "nope"})

        user = await engine.auth(registry.entry("token"), req, SimpleResponse())

        assert user is None
        assert req.unauthorized_error.message == "invalid token"

    @pytest.mark.asyncio
    async def test_ending_response_fails(self, engine, registry):
        class RudeAuth:
            name = "rude-auth"

            def knock_auth(self, req, res):
                res.end()
                return {"id": 1}

        registry.enable("rude-auth", RudeAuth())
        with pytest.raises(UnauthorizedError):
            await engine.auth(registry.entry("rude-auth"), SimpleRequest(), SimpleResponse())

    @pytest.mark.asyncio
    async def test_run_dispatches_by_type(self, engine, registry):
        registry.enable("static", StaticSchema("static"))

        user = await engine.run("auth", registry.entry("static"), SimpleRequest(), SimpleResponse())
        assert user == {"id": 1}
