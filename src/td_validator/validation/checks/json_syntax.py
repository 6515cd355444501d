"""JSON syntax check.

Decodes the raw document text. This is the first stage; if it fails the
document cannot be checked any further.
"""

from __future__ import annotations

import json
import logging
import time

from td_validator.core.enums import StageName, StageStatus
from td_validator.core.utils import elapsed_ms
from td_validator.exceptions import ParseError
from ..models import StageResult, Thing

logger = logging.getLogger(__name__)


def parse_json(thing: Thing) -> bool:
    """Parse ``thing.raw_content`` into ``thing.parsed``.

    Args:
        thing: Freshly loaded Thing.

    Returns:
        True if the content is valid JSON, False otherwise. On failure the
        json stage is Invalid with the decoder's diagnostic (message, line and
        column) and ``parsed`` stays None.
    """
    start = time.perf_counter()
    try:
        parsed = json.loads(thing.raw_content, parse_constant=_reject_constant)
    except ValueError as e:
        error = _to_parse_error(e)
        logger.error("Error parsing JSON file in %s: %s", thing.title, error)
        thing.record(
            StageName.JSON,
            StageResult(StageStatus.INVALID, elapsed_ms(start), str(error)),
        )
        return False

    thing.parsed = parsed
    thing.record(StageName.JSON, StageResult(StageStatus.VALID, elapsed_ms(start)))
    return True


def _reject_constant(name: str) -> None:
    # NaN and Infinity are accepted by the json module but are not JSON
    raise ValueError(f"Invalid JSON constant: '{name}'")


def _to_parse_error(e: ValueError) -> ParseError:
    if isinstance(e, json.JSONDecodeError):
        return ParseError(f"{e.msg}: line {e.lineno} column {e.colno} (char {e.pos})")
    return ParseError(str(e))
