"""Bundled JSON Schemas for Thing Descriptions and Thing Models.

This module loads the schema documents shipped under ``td_validator/schemas``
and compiles them into ``jsonschema`` validators. Validators are compiled once
per process and shared read-only by every document being validated.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, List

from jsonschema import Draft7Validator, FormatChecker
from referencing import Registry, Resource

from .enums import ThingKind

TD_SCHEMA = "td-schema.json"
TD_SCHEMA_FULL = "td-schema-full.json"
TM_SCHEMA = "tm-schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """Load a bundled schema document by file name.

    Args:
        name: Schema file name (e.g., "td-schema.json").

    Returns:
        The parsed schema as a dictionary.

    Raises:
        FileNotFoundError: If no schema with this name is bundled.

    Examples:
        >>> load_schema(TD_SCHEMA)["title"]
        'Thing Description'
    """
    resource = resources.files("td_validator") / "schemas" / name
    if not resource.is_file():
        raise FileNotFoundError(f"Bundled schema not found: {name}")
    return json.loads(resource.read_text(encoding="utf-8"))


def _schema_registry() -> Registry:
    # The full TD schema references the base TD schema by its $id
    registry = Registry()
    for name in (TD_SCHEMA, TM_SCHEMA):
        schema = load_schema(name)
        registry = registry.with_resource(schema["$id"], Resource.from_contents(schema))
    return registry


@lru_cache(maxsize=None)
def get_validator(kind: ThingKind, full: bool = False) -> Draft7Validator:
    """Get the compiled validator for a document kind.

    Args:
        kind: Kind of document (TD or TM).
        full: Return the stricter defaults schema validator. Only TDs have one.

    Returns:
        A Draft-07 validator with format checking enabled.

    Raises:
        ValueError: If a full validator is requested for a Thing Model.
    """
    if kind == ThingKind.TM:
        if full:
            raise ValueError("Thing Models have no defaults schema")
        name = TM_SCHEMA
    else:
        name = TD_SCHEMA_FULL if full else TD_SCHEMA
    return Draft7Validator(
        load_schema(name),
        registry=_schema_registry(),
        format_checker=FormatChecker(),
    )


def schema_errors(validator: Draft7Validator, instance: Any) -> List[str]:
    """Collect all schema violations for an instance, sorted by location.

    Each entry has the form ``"<json path>: <message>"``. The ordering is
    stable so that repeated runs over the same document give identical text.
    """
    errors = sorted(validator.iter_errors(instance), key=lambda e: (e.json_path, e.message))
    return [f"{error.json_path}: {error.message}" for error in errors]


__all__ = [
    "TD_SCHEMA",
    "TD_SCHEMA_FULL",
    "TM_SCHEMA",
    "load_schema",
    "get_validator",
    "schema_errors",
]
