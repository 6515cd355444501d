"""Thing Description / Thing Model classification."""

from __future__ import annotations

from td_validator.core.enums import ThingKind
from ..config import TM_TYPE
from ..models import Thing


def check_thing_type(thing: Thing) -> ThingKind:
    """Set ``thing.kind`` from the parsed document.

    A document is a Thing Model iff it is a JSON object whose "@type" is
    exactly "tm:ThingModel". Anything else, including an "@type" array that
    contains the tag, is treated as a Thing Description.
    """
    parsed = thing.parsed
    if isinstance(parsed, dict) and parsed.get("@type") == TM_TYPE:
        thing.kind = ThingKind.TM
    else:
        thing.kind = ThingKind.TD
    return thing.kind
