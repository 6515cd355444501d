"""Core utility functions for the Thing Description validator.

This module resolves the input set given on the command line to the list of
documents to validate.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, List, Tuple, Union

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".json", ".jsonld")


def elapsed_ms(start: float) -> float:
    """Milliseconds since a `time.perf_counter()` reading."""
    return (time.perf_counter() - start) * 1000.0


def is_document(path: Path) -> bool:
    """Return True if the file name has a structured-data extension."""
    return path.name.endswith(DOCUMENT_SUFFIXES)


def scan_files(paths: Iterable[Union[str, Path]]) -> Tuple[List[Path], List[Path]]:
    """Expand input paths into the documents to validate.

    Directories are walked recursively in sorted order; only files ending in
    ``.json`` or ``.jsonld`` are kept and everything else is ignored. Files
    given explicitly follow the same extension rule.

    Args:
        paths: Files and/or directories, in the order given by the user.

    Returns:
        A tuple of (documents, missing_paths). Input order is preserved and a
        document reachable through several inputs is listed once.

    Examples:
        >>> files, missing = scan_files(["examples/tds", "nope.json"])
        >>> missing
        [PosixPath('nope.json')]
    """
    files: List[Path] = []
    missing: List[Path] = []
    seen = set()

    def _add(file_path: Path) -> None:
        key = file_path.resolve()
        if key not in seen:
            seen.add(key)
            files.append(file_path)

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            logger.warning("File or directory does not exist: %s", path)
            missing.append(path)
            continue
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                if child.is_file() and is_document(child):
                    _add(child)
        elif is_document(path):
            _add(path)
        else:
            logger.debug("Ignoring non-JSON file: %s", path)

    return files, missing


__all__ = ["DOCUMENT_SUFFIXES", "elapsed_ms", "is_document", "scan_files"]
