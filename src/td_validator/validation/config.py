"""Validation configuration.

This module centralizes the options that steer a validation run. CLI flags
are turned into a ValidationConfig and passed explicitly to the pipeline and
the reporters; nothing reads global option state.

Options can also be kept in a YAML file:

    offline: true
    junit: true
    junit_path: build/report.xml
    jsonld_timeout: 10
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from td_validator.exceptions import ConfigError

# Literal "@type" value that marks a Thing Model
TM_TYPE = "tm:ThingModel"

DEFAULT_JUNIT_PATH = Path("report.xml")

# Seconds to wait for JSON-LD processing of one document
DEFAULT_JSONLD_TIMEOUT = 30.0


@dataclass(frozen=True)
class ValidationConfig:
    """Options for a validation run.

    Attributes:
        offline: Skip the JSON-LD stage for every document.
        junit: Write a JUnit XML report.
        junit_path: Where the JUnit report goes.
        report_json: Write a JSON report to this path when set.
        jsonld_timeout: Limit for JSON-LD processing of one document, in
            seconds. None disables the limit.
        allow_empty: Exit successfully when no document was found.
        show_progress: Display a progress bar while validating.
    """

    offline: bool = False
    junit: bool = False
    junit_path: Path = DEFAULT_JUNIT_PATH
    report_json: Optional[Path] = None
    jsonld_timeout: Optional[float] = DEFAULT_JSONLD_TIMEOUT
    allow_empty: bool = False
    show_progress: bool = True

    def __post_init__(self) -> None:
        if self.jsonld_timeout is not None and self.jsonld_timeout < 0:
            raise ConfigError(f"jsonld_timeout must be >= 0, got {self.jsonld_timeout}")
        # 0 means no limit
        if self.jsonld_timeout == 0:
            object.__setattr__(self, "jsonld_timeout", None)
        object.__setattr__(self, "junit_path", Path(self.junit_path))
        if self.report_json is not None:
            object.__setattr__(self, "report_json", Path(self.report_json))

    def replace(self, **changes: Any) -> "ValidationConfig":
        """Return a copy with the given options changed; None values are ignored."""
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v is not None})


_FIELD_TYPES = {
    "offline": (bool,),
    "junit": (bool,),
    "junit_path": (str,),
    "report_json": (str,),
    "jsonld_timeout": (int, float, type(None)),
    "allow_empty": (bool,),
    "show_progress": (bool,),
}


def config_from_dict(data: Dict[str, Any]) -> ValidationConfig:
    """Build a ValidationConfig from a plain mapping.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.
    """
    unknown = sorted(set(data) - set(_FIELD_TYPES))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
    for key, value in data.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; do not accept it as a timeout
        if not isinstance(value, expected) or (key == "jsonld_timeout" and isinstance(value, bool)):
            names = ", ".join(t.__name__ for t in expected)
            raise ConfigError(f"Invalid value for '{key}': {value!r} (expected {names})")
    return ValidationConfig(**data)


def load_config(path: Union[str, Path]) -> ValidationConfig:
    """Load validation options from a YAML file.

    Args:
        path: YAML file containing a mapping of option names to values.

    Returns:
        The resulting configuration; options not in the file keep defaults.

    Raises:
        ConfigError: If the file is missing, not valid YAML, or has bad options.
    """
    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {config_path}") from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return config_from_dict(data)


__all__ = [
    "TM_TYPE",
    "DEFAULT_JUNIT_PATH",
    "DEFAULT_JSONLD_TIMEOUT",
    "ValidationConfig",
    "config_from_dict",
    "load_config",
]
