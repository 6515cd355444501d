"""Validation stages.

Each stage is a function over a Thing that records its own StageResult and
returns whether the pipeline may continue:

- json_syntax.parse_json: decode the raw text as JSON
- thing_type.check_thing_type: classify as TD or TM (records no result)
- schema.validate_schema: JSON Schema check, plus the TD defaults check
- jsonld.validate_jsonld: JSON-LD to RDF conversion (async)

Stages never raise for problems in the document itself; failures are
recorded in ``thing.report`` and logged as they happen.

The JSON-LD stage talks to its engine through the JsonLdProcessor protocol
so that tests can substitute a deterministic implementation:

    ```python
    class AlwaysValid:
        def to_rdf(self, document):
            return ""
    ```
"""

from __future__ import annotations

from typing import Any, Protocol


class JsonLdProcessor(Protocol):
    """Protocol for engines that convert a JSON-LD document to RDF.

    Use duck typing (Protocol) - no need to inherit from a base class.
    """

    def to_rdf(self, document: Any) -> str:
        """Convert a document to N-Quads.

        Args:
            document: Parsed JSON-LD document.

        Returns:
            The N-Quads serialization.

        Raises:
            Exception: Any failure (bad context, unreachable remote context,
                network error) means the document is not valid JSON-LD.
        """
        ...


__all__ = ["JsonLdProcessor"]
