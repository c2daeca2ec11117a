"""
Schema loader.

Registers schemas from a YAML file instead of code:

    schemas:
      - name: password
        class: myapp.auth:PasswordSchema
        default: true
        kwargs:
          max_attempts: 5
      - name: token
        class: myapp.auth:token_schema   # an instance works too
        default: true
"""

from __future__ import annotations

import importlib
import inspect
import logging
from pathlib import Path
from typing import Any

import yaml

from knockknock.core.errors import ConfigurationError, KnockKnockError
from knockknock.core.registry import SchemaEntry, SchemaRegistry, get_registry

logger = logging.getLogger(__name__)


class SchemaLoadError(KnockKnockError):
    """Raised when a schema file can't be loaded."""
    pass


def import_object(path: str) -> Any:
    """Import `package.module:attr` (or `package.module.attr`)."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")

    if not module_name or not attr:
        raise SchemaLoadError(f"Invalid import path '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SchemaLoadError(f"Cannot import '{module_name}': {e}") from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise SchemaLoadError(f"'{module_name}' has no attribute '{attr}'") from e
    return obj


class SchemaLoader:
    """
    Loads schema definitions and enables them on a registry.

    Pass the dispatcher's registry (`knock.registry`) to wire schemas into a
    specific KnockKnock instance.
    """

    def __init__(self, registry: SchemaRegistry | None = None):
        self.registry = registry if registry is not None else get_registry()

    def load_file(self, path: Path | str) -> list[SchemaEntry]:
        """Load schemas from a YAML file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise SchemaLoadError(f"Cannot read '{path}': {e}") from e
        except yaml.YAMLError as e:
            raise SchemaLoadError(f"Invalid YAML in '{path}': {e}") from e

        return self.load_dict(data or {})

    def load_dict(self, data: dict[str, Any]) -> list[SchemaEntry]:
        """Load schemas from parsed config."""
        if not isinstance(data, dict):
            raise SchemaLoadError("Schema config must be a mapping")

        definitions = data.get("schemas") or []
        if not isinstance(definitions, list):
            raise SchemaLoadError("'schemas' must be a list")

        return [self.load_schema(d) for d in definitions]

    def load_schema(self, definition: dict[str, Any]) -> SchemaEntry:
        """Build and enable one schema."""
        if not isinstance(definition, dict) or "class" not in definition:
            raise SchemaLoadError(f"Schema definition needs a 'class': {definition!r}")

        target = import_object(definition["class"])
        kwargs = definition.get("kwargs") or {}

        if inspect.isclass(target):
            try:
                schema = target(**kwargs)
            except TypeError as e:
                raise SchemaLoadError(
                    f"Cannot create {definition['class']}: {e}"
                ) from e
        else:
            if kwargs:
                raise SchemaLoadError(
                    f"'{definition['class']}' is not a class, kwargs not allowed"
                )
            schema = target

        verify = definition.get("verify")
        if verify:
            verify = import_object(verify)

        try:
            entry = self.registry.enable(
                definition.get("name"),
                schema,
                bool(definition.get("default", False)),
                verify,
            )
        except ConfigurationError as e:
            raise SchemaLoadError(f"Cannot enable {definition['class']}: {e}") from e

        logger.debug("Loaded schema '%s' from %s", entry.name, definition["class"])
        return entry


def load_schemas(path: Path | str, registry: SchemaRegistry | None = None) -> list[SchemaEntry]:
    """
    Convenience function to load a schema file.

    Returns:
        The enabled registry entries
    """
    loader = SchemaLoader(registry)
    return loader.load_file(path)
