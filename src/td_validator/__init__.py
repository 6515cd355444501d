"""WoT Thing Description validator.

Validates Thing Descriptions (TDs) and Thing Models (TMs) in layered stages:
JSON syntax, JSON Schema, TD defaults conventions and JSON-LD semantics.
"""

__all__ = [
    "__version__",
]

__version__ = "2.0.1"
