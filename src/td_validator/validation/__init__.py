"""Validation system for the Thing Description validator.

This module provides the layered validation pipeline for TDs and TMs:

- **Models**: StageResult, Thing, ValidationRun - per-stage and per-run results
- **Loader**: load_thing() - read a document into a Thing
- **Checks**: the stage functions (see validation/checks/)
- **Runner**: Pipeline - per-document state machine, concurrent over documents
- **Registry**: run_validation(), print_report() - end-to-end run and console output
- **Reporting**: console table, JUnit XML and JSON reports

Public API:
    ValidationConfig: Options for a run (offline, junit, timeouts, ...)
    run_validation: Validate every document found under some paths
    print_report: Display the results table and summary

Usage:
    >>> from td_validator.validation import ValidationConfig, run_validation, print_report
    >>> run = run_validation(["examples/tds"], ValidationConfig(offline=True))
    >>> print_report(run)
    >>> run.exit_code()
    0
"""

from __future__ import annotations

from td_validator.core.enums import StageName, StageStatus, ThingKind

from .config import ValidationConfig, load_config
from .loader import load_thing
from .models import StageResult, Thing, ValidationRun
from .registry import print_report, run_validation
from .runner import Pipeline, validate_thing, validate_things

__all__ = [
    # Data models
    "StageResult",
    "Thing",
    "ValidationRun",
    # Configuration
    "ValidationConfig",
    "load_config",
    # Pipeline
    "load_thing",
    "Pipeline",
    "validate_thing",
    "validate_things",
    # Runner functions
    "run_validation",
    "print_report",
    # Enums
    "StageName",
    "StageStatus",
    "ThingKind",
]
