"""JSON Schema validation of Thing Descriptions and Thing Models.

Documents are checked against the TD or TM schema according to their kind.
A TD that passes is additionally checked against the full TD schema, which
requires every term that has a default value to be stated. A mismatch there
is only a warning: the TD is still valid.
"""

from __future__ import annotations

import logging
import time

from td_validator.core.enums import StageName, StageStatus, ThingKind
from td_validator.core.schemas import get_validator, schema_errors
from td_validator.core.utils import elapsed_ms
from td_validator.exceptions import DefaultsWarning, SchemaError
from ..models import StageResult, Thing

logger = logging.getLogger(__name__)


def errors_text(errors: list) -> str:
    """Join schema errors into a single comma-separated diagnostic."""
    return ", ".join(errors)


def validate_schema(thing: Thing) -> bool:
    """Validate the parsed document against the schema for its kind.

    Args:
        thing: Parsed and classified Thing.

    Returns:
        False if the schema stage is Invalid (the pipeline must stop), True
        otherwise. A defaults warning does not make this return False.
    """
    start = time.perf_counter()
    errors = schema_errors(get_validator(thing.kind), thing.parsed)
    if errors:
        error = SchemaError(errors_text(errors))
        logger.error("Error validating Schema in %s: %s", thing.title, error)
        thing.record(
            StageName.SCHEMA,
            StageResult(StageStatus.INVALID, elapsed_ms(start), str(error)),
        )
        return False

    thing.record(StageName.SCHEMA, StageResult(StageStatus.VALID, elapsed_ms(start)))

    if not thing.is_tm:
        validate_defaults(thing)
    return True


def validate_defaults(thing: Thing) -> StageStatus:
    """Check a schema-valid TD against the full TD schema.

    Records Valid or Warning on the defaults stage; never Invalid.
    """
    start = time.perf_counter()
    errors = schema_errors(get_validator(ThingKind.TD, full=True), thing.parsed)
    if errors:
        warning = DefaultsWarning(errors_text(errors))
        logger.warning(
            "Warning: %s does not conform to the TD Defaults schema: %s", thing.title, warning
        )
        result = StageResult(StageStatus.WARNING, elapsed_ms(start), str(warning))
    else:
        result = StageResult(StageStatus.VALID, elapsed_ms(start))
    thing.record(StageName.DEFAULTS, result)
    return result.status
