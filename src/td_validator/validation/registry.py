"""Validation run orchestration.

This module ties the pieces of a run together:
- run_validation(): resolve inputs, load documents, validate them concurrently
- print_report(): display the results to the console
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from td_validator.core.utils import scan_files
from td_validator.exceptions import ReadError
from .checks import JsonLdProcessor
from .config import ValidationConfig
from .loader import load_thing
from .models import Thing, ValidationRun
from .reporting import format_table
from .runner import Pipeline

logger = logging.getLogger(__name__)


def load_things(files: Iterable[Path]) -> ValidationRun:
    """Load every document, collecting read errors instead of stopping.

    Returns:
        ValidationRun with the loaded Things (not yet validated) and the
        documents that could not be read.
    """
    run = ValidationRun()
    for file_path in files:
        try:
            run.things.append(load_thing(file_path))
        except ReadError as e:
            logger.error("%s", e)
            run.read_errors.append(e)
    return run


async def validate_run(
    run: ValidationRun,
    config: ValidationConfig,
    processor: Optional[JsonLdProcessor] = None,
) -> ValidationRun:
    """Validate all loaded Things of a run concurrently.

    Shows a progress bar that advances as documents finish; log records are
    written above it.
    """
    pipeline = Pipeline(config, processor)
    show_progress = config.show_progress and len(run.things) > 1

    with tqdm(
        total=len(run.things), unit="doc", disable=not show_progress, leave=False
    ) as bar, logging_redirect_tqdm():

        async def _validate(thing: Thing) -> bool:
            valid = await pipeline.validate(thing)
            bar.update(1)
            return valid

        await asyncio.gather(*(_validate(thing) for thing in run.things))

    return run


def run_validation(
    paths: Iterable[Union[str, Path]],
    config: Optional[ValidationConfig] = None,
    processor: Optional[JsonLdProcessor] = None,
) -> ValidationRun:
    """Validate every document found under the given paths.

    Args:
        paths: Files and/or directories. Directories are searched recursively
            for ``.json`` and ``.jsonld`` files.
        config: Run options. Defaults to online validation.
        processor: JSON-LD engine override (e.g., a stub in tests).

    Returns:
        ValidationRun with every Thing in DONE state, plus missing paths and
        read errors.

    Raises:
        ValueError: If no input path was given at all.

    Examples:
        >>> run = run_validation(["examples/tds"], ValidationConfig(offline=True))
        >>> print(run.summary())
    """
    path_list: List[Union[str, Path]] = list(paths)
    if not path_list:
        raise ValueError("No input paths given")
    config = config or ValidationConfig()

    files, missing = scan_files(path_list)
    logger.info(
        "Found %d file%s to validate.", len(files), "" if len(files) == 1 else "s"
    )

    run = load_things(files)
    run.missing_paths = missing
    asyncio.run(validate_run(run, config, processor))
    return run


def print_report(run: ValidationRun) -> None:
    """Print the results table and summary to the console.

    Examples:
        >>> print_report(run)
        File              Type JSON Schema Defaults JSON-LD  Time (ms) Valid
        MyLampThing.json    TD    ✔      ✔        ✔       ✔       52.1     ✔
        Validated 1 document: 1 valid, 0 invalid
    """
    if run.things:
        print(format_table(run.things))
    for error in run.read_errors:
        print(f"✘ {error}")
    print(run.summary())


__all__ = ["load_things", "validate_run", "run_validation", "print_report"]
