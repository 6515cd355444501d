"""Exception hierarchy for the Thing Description validator.

Per-document errors (read, parse, schema, semantic) are recorded into the
Thing's report by the pipeline; only ReadError and ConfigError are raised to
callers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union


class ValidatorError(Exception):
    """Base class for all validator errors."""


class ReadError(ValidatorError):
    """A document could not be read from disk."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path}: {reason}")


class ParseError(ValidatorError):
    """Document content is not valid JSON."""


class SchemaError(ValidatorError):
    """Document does not conform to the TD or TM JSON Schema."""


class SemanticError(ValidatorError):
    """JSON-LD processing of the document failed."""


class DefaultsWarning(UserWarning):
    """TD does not state values that carry specification defaults."""


class ConfigError(ValidatorError):
    """Invalid validator configuration."""


__all__ = [
    "ValidatorError",
    "ReadError",
    "ParseError",
    "SchemaError",
    "SemanticError",
    "DefaultsWarning",
    "ConfigError",
]
