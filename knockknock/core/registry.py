"""
Registry for schemas.

The registry is the central place where login and auth schemas are
registered and looked up. Middleware references schemas by name, or lets
the registry pick the default one for a capability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from knockknock.core.capabilities import SchemaCapabilities, SchemaType
from knockknock.core.errors import ConfigurationError
from knockknock.core.utils import is_scalar

logger = logging.getLogger(__name__)


@dataclass
class SchemaEntry:
    """A registered schema plus what the registry knows about it."""

    name: str
    schema: Any
    is_default: bool = False
    capabilities: SchemaCapabilities = field(default_factory=SchemaCapabilities)

    def supports(self, schema_type: SchemaType | str) -> bool:
        return self.capabilities.supports(schema_type)


class SchemaRegistry:
    """
    Central registry for schemas.

    Names are unique: enabling a schema under an existing name replaces it.
    The default schema per capability is computed lazily and memoized until
    the next `enable` or `disable`.
    """

    def __init__(self):
        # name -> entry, in registration order
        self._entries: dict[str, SchemaEntry] = {}

        # capability -> first default entry supporting it
        self._default_cache: dict[SchemaType, SchemaEntry | None] = {}

    # =========================================================================
    # Mutation
    # =========================================================================

    def enable(
        self,
        name: str | None,
        schema: Any,
        set_default: bool = False,
        verify: Callable[..., Any] | None = None,
    ) -> SchemaEntry:
        """
        Register a schema.

        Args:
            name: Registry key. Takes precedence over `schema.name`.
            schema: The schema object.
            set_default: Use this schema when a request doesn't name one.
            verify: Installed as `schema.verify` if callable.

        Raises:
            ConfigurationError: No name could be resolved, or `schema`
                isn't an object.
        """
        if schema is None or is_scalar(schema):
            raise ConfigurationError(f"schema must be an object, got {schema!r}")

        if name and isinstance(name, str):
            schema.name = name
        else:
            name = getattr(schema, "name", None)

        if not name:
            raise ConfigurationError("schema has no name")

        if callable(verify):
            schema.verify = verify

        replaced = name in self._entries
        self._entries[name] = SchemaEntry(
            name=name,
            schema=schema,
            is_default=bool(set_default),
            capabilities=SchemaCapabilities.probe(schema),
        )
        self._default_cache.clear()

        logger.info(
            "%s schema '%s' (default=%s, capabilities=%s)",
            "Replaced" if replaced else "Enabled",
            name,
            bool(set_default),
            sorted(t.value for t in self._entries[name].capabilities.types),
        )
        return self._entries[name]

    def disable(self, name: str) -> None:
        """Unregister a schema. Unknown names are ignored."""
        if not name:
            raise ConfigurationError("name is required to disable a schema")

        if self._entries.pop(name, None) is not None:
            logger.info("Disabled schema '%s'", name)
        self._default_cache.clear()

    # =========================================================================
    # Lookup
    # =========================================================================

    @property
    def valid(self) -> bool:
        """Is there at least one schema that can log users in?"""
        if not self._entries:
            return False
        return any(e.supports(SchemaType.LOGIN) for e in self._entries.values())

    def prefer_schema(
        self,
        name: str | None = None,
        schema_type: SchemaType | str | None = None,
    ) -> SchemaEntry | None:
        """
        Pick the schema that handles a request.

        An explicit name is looked up directly and never falls back to a
        default; with a type, the named schema must also support it.
        Without a name, returns the first default schema supporting the type.
        """
        if name:
            entry = self._entries.get(name)
            if entry is not None and schema_type and not entry.supports(schema_type):
                logger.debug("Schema '%s' doesn't support %s", name, schema_type)
                return None
            return entry

        if schema_type:
            schema_type = SchemaType(schema_type)
            if schema_type not in self._default_cache:
                self._default_cache[schema_type] = next(
                    (
                        e for e in self._entries.values()
                        if e.is_default and e.supports(schema_type)
                    ),
                    None,
                )
                logger.debug(
                    "Default %s schema: %s",
                    schema_type.value,
                    getattr(self._default_cache[schema_type], "name", None),
                )
            return self._default_cache[schema_type]

        return None

    def entry(self, name: str) -> SchemaEntry | None:
        """Get a registry entry by name."""
        return self._entries.get(name)

    def get(self, name: str) -> Any:
        """Get a schema by name."""
        entry = self._entries.get(name)
        return entry.schema if entry else None

    def names(self) -> list[str]:
        """List all registered schema names."""
        return list(self._entries.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Singleton registry for the application
_default_registry: SchemaRegistry | None = None


def get_registry() -> SchemaRegistry:
    """Get the default registry instance."""
    global _default_registry
    if _default_registry is None:
        _default_registry = SchemaRegistry()
    return _default_registry


def reset_registry() -> None:
    """Reset the default registry (useful for testing)."""
    global _default_registry
    _default_registry = None
