"""
Core module - the dispatcher's building blocks.

This module contains:
- capabilities: which methods make a schema login- or auth-capable
- registry: schema registry and default-schema resolution
- carrier: request/response contracts and parameter extraction
- engine: login/auth execution pipelines
- errors: UnauthorizedError and ConfigurationError
"""

from knockknock.core.capabilities import (
    EXPOSED_METHODS,
    OPTIONAL_METHODS,
    REQUIRED_METHODS,
    SELECTOR_PARAMS,
    Handler,
    MethodKind,
    SchemaCapabilities,
    SchemaType,
    has_required_function,
)

from knockknock.core.carrier import (
    RequestCarrier,
    ResponseCarrier,
    SimpleRequest,
    SimpleResponse,
    get_param,
)

from knockknock.core.engine import (
    ExecutionEngine,
    set_user,
)

from knockknock.core.errors import (
    ConfigurationError,
    KnockKnockError,
    UnauthorizedError,
)

from knockknock.core.options import (
    KnockKnockOptions,
    normalize_options,
)

from knockknock.core.registry import (
    SchemaEntry,
    SchemaRegistry,
    get_registry,
    reset_registry,
)

from knockknock.core.schema import (
    AuthSchema,
    LoginSchema,
    Schema,
)

__all__ = [
    # Capabilities
    "EXPOSED_METHODS",
    "OPTIONAL_METHODS",
    "REQUIRED_METHODS",
    "SELECTOR_PARAMS",
    "Handler",
    "MethodKind",
    "SchemaCapabilities",
    "SchemaType",
    "has_required_function",
    # Carriers
    "RequestCarrier",
    "ResponseCarrier",
    "SimpleRequest",
    "SimpleResponse",
    "get_param",
    # Engine
    "ExecutionEngine",
    "set_user",
    # Errors
    "ConfigurationError",
    "KnockKnockError",
    "UnauthorizedError",
    # Options
    "KnockKnockOptions",
    "normalize_options",
    # Registry
    "SchemaEntry",
    "SchemaRegistry",
    "get_registry",
    "reset_registry",
    # Schemas
    "AuthSchema",
    "LoginSchema",
    "Schema",
]
