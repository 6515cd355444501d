"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class ThingKind(str, Enum):
    """Kind of a validated document.

    Values are strings to ease serialization and report output.
    """

    TD = "TD"
    TM = "TM"


class StageName(str, Enum):
    """Validation stages, in pipeline order."""

    JSON = "json"
    SCHEMA = "schema"
    DEFAULTS = "defaults"
    JSONLD = "jsonld"


class StageStatus(str, Enum):
    """Outcome of a single validation stage."""

    VALID = "valid"
    INVALID = "invalid"
    WARNING = "warning"
    SKIPPED = "skipped"

    @property
    def symbol(self) -> str:
        return _STATUS_SYMBOLS[self]


_STATUS_SYMBOLS = {
    StageStatus.VALID: "✔",
    StageStatus.INVALID: "✘",
    StageStatus.WARNING: "⚠",
    StageStatus.SKIPPED: "-",
}


class PipelineState(str, Enum):
    """States a Thing moves through while being validated.

    The order is strict; a failing stage jumps straight to DONE.
    """

    LOADED = "loaded"
    PARSED = "parsed"
    CLASSIFIED = "classified"
    SCHEMA_CHECKED = "schema_checked"
    SEMANTIC_CHECKED = "semantic_checked"
    DONE = "done"


__all__ = ["ThingKind", "StageName", "StageStatus", "PipelineState"]
