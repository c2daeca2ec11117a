"""
Schema capabilities.

This defines WHICH methods make a schema usable for login or auth,
not HOW those methods are invoked. Invocation lives in engine.py.

A schema is login-capable iff `knock_login` is callable, and auth-capable
iff `knock_auth` is callable. Everything else is optional and probed once,
when the schema is registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class SchemaType(str, Enum):
    """Capability families a schema can provide."""

    LOGIN = "login"  # Authenticate credentials, establish a session marker
    AUTH = "auth"    # Validate an existing session marker


class MethodKind(str, Enum):
    """How a dispatchable method is run."""

    REQUIRED = "required"  # Full login/auth pipeline with hooks
    OPTIONAL = "optional"  # Called directly, no hooks


# =============================================================================
# Capability Table
# =============================================================================


# The one method a schema must implement to provide a capability
REQUIRED_METHODS: dict[SchemaType, str] = {
    SchemaType.LOGIN: "knock_login",
    SchemaType.AUTH: "knock_auth",
}

# Extra methods a schema may implement
OPTIONAL_METHODS: dict[SchemaType, tuple[str, ...]] = {
    SchemaType.LOGIN: ("login", "login_response", "oauth_login", "oauth_callback"),
    SchemaType.AUTH: ("create", "auth", "auth_response", "revoke"),
}

# Methods turned into middleware factories by the dispatcher
EXPOSED_METHODS: dict[SchemaType, tuple[str, ...]] = {
    SchemaType.LOGIN: ("knock_login", "login", "oauth_login", "oauth_callback"),
    SchemaType.AUTH: ("knock_auth", "auth", "revoke"),
}

# Request parameter a client uses to pick a schema by name
SELECTOR_PARAMS: dict[SchemaType, str] = {
    SchemaType.LOGIN: "knockLogin",
    SchemaType.AUTH: "knockAuth",
}


def has_required_function(schema: Any, schema_type: SchemaType | str) -> bool:
    """Is `schema` usable for `schema_type`?"""
    if schema is None:
        return False
    method = REQUIRED_METHODS[SchemaType(schema_type)]
    return callable(getattr(schema, method, None))


def owner_type(method: str) -> SchemaType:
    """The capability family an exposed method belongs to."""
    for schema_type, methods in EXPOSED_METHODS.items():
        if method in methods:
            return schema_type
    raise KeyError(f"'{method}' is not an exposed schema method")


# =============================================================================
# Per-schema Descriptor
# =============================================================================


@dataclass(frozen=True)
class Handler:
    """A method found on a schema, tagged with how to run it."""

    name: str
    schema_type: SchemaType
    kind: MethodKind
    func: Callable[..., Any]


@dataclass
class SchemaCapabilities:
    """
    What a particular schema can do.

    Built once at registration by probing the schema, so request handling
    never has to inspect the schema object again.
    """

    types: set[SchemaType] = field(default_factory=set)
    handlers: dict[str, Handler] = field(default_factory=dict)

    @classmethod
    def probe(cls, schema: Any) -> SchemaCapabilities:
        caps = cls()

        for schema_type, required in REQUIRED_METHODS.items():
            required_func = getattr(schema, required, None)
            if callable(required_func):
                caps.types.add(schema_type)
                caps.handlers[required] = Handler(
                    required, schema_type, MethodKind.REQUIRED, required_func
                )

            for name in OPTIONAL_METHODS[schema_type]:
                func = getattr(schema, name, None)
                if not callable(func):
                    continue
                # An alias of the required method (login = knock_login) runs
                # the full pipeline
                kind = (
                    MethodKind.REQUIRED
                    if required_func is not None and func == required_func
                    else MethodKind.OPTIONAL
                )
                caps.handlers[name] = Handler(name, schema_type, kind, func)

        return caps

    def supports(self, schema_type: SchemaType | str) -> bool:
        return SchemaType(schema_type) in self.types

    def handler(self, name: str) -> Handler | None:
        return self.handlers.get(name)

    def has(self, name: str) -> bool:
        return name in self.handlers
