"""
knockknock - pluggable login/auth dispatcher for HTTP middleware.

Design principles:
1. Schemas are plugins: register any object with knock_login / knock_auth
2. The request may pick its schema (knockLogin / knockAuth params)
3. Every outcome is either req.user or a typed UnauthorizedError
4. Misconfiguration fails fast
"""

from knockknock.core import (
    AuthSchema,
    ConfigurationError,
    KnockKnockOptions,
    LoginSchema,
    Schema,
    SchemaRegistry,
    SchemaType,
    SimpleRequest,
    SimpleResponse,
    UnauthorizedError,
    get_param,
)
from knockknock.dispatcher import KnockKnock
from knockknock.loader import SchemaLoader, SchemaLoadError, load_schemas

__version__ = "0.1.0"

__all__ = [
    # Main interface
    "KnockKnock",
    "KnockKnockOptions",
    # Schemas
    "Schema",
    "LoginSchema",
    "AuthSchema",
    "SchemaType",
    "SchemaRegistry",
    # Errors
    "UnauthorizedError",
    "ConfigurationError",
    # Carriers
    "SimpleRequest",
    "SimpleResponse",
    "get_param",
    # Loader
    "SchemaLoader",
    "SchemaLoadError",
    "load_schemas",
]
