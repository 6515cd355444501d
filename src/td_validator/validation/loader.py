"""Document loader.

Turns a file path into a Thing ready for the pipeline. No validation happens
here; a file that cannot be read raises ReadError for that document only.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from td_validator.exceptions import ReadError
from .models import Thing


def load_thing(path: Union[str, Path]) -> Thing:
    """Read a document into a fresh Thing.

    Args:
        path: Path of the document.

    Returns:
        Thing with ``raw_content`` set, kind TD and every stage Skipped.

    Raises:
        ReadError: If the path does not exist, is not a file, cannot be read,
            or is not valid UTF-8 text.

    Examples:
        >>> thing = load_thing("examples/tds/valid/MinimalThing.json")
        >>> thing.title
        'MinimalThing.json'
    """
    file_path = Path(path)
    if not file_path.exists():
        raise ReadError(file_path, "no such file")
    if not file_path.is_file():
        raise ReadError(file_path, "not a regular file")
    try:
        # Decoded from bytes so line endings stay as written
        raw_content = file_path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ReadError(file_path, f"not valid UTF-8 text ({e.reason} at byte {e.start})") from e
    except OSError as e:
        raise ReadError(file_path, e.strerror or str(e)) from e
    return Thing(path=file_path, raw_content=raw_content)


__all__ = ["load_thing"]
