"""JSON-LD semantic validation.

The parsed document is converted to RDF (N-Quads). If the conversion
completes, the JSON-LD context resolves and the document is valid JSON-LD.
Conversion may fetch remote contexts over the network, so it runs in a
daemon worker thread with a timeout.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import time
from typing import Any, Optional

from pyld import jsonld

from td_validator.core.enums import StageName, StageStatus
from td_validator.core.utils import elapsed_ms
from td_validator.exceptions import SemanticError
from ..models import StageResult, Thing
from . import JsonLdProcessor

logger = logging.getLogger(__name__)

NQUADS = "application/n-quads"


class PyLdProcessor:
    """JSON-LD processor backed by PyLD.

    Remote contexts are fetched with PyLD's requests-based document loader.

    Args:
        timeout: Seconds allowed for each remote context request. None waits
            indefinitely.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout
        loader_kwargs = {} if timeout is None else {"timeout": timeout}
        self._document_loader = jsonld.requests_document_loader(**loader_kwargs)

    def to_rdf(self, document: Any) -> str:
        return jsonld.to_rdf(
            document,
            {"format": NQUADS, "documentLoader": self._document_loader},
        )


def _start_conversion(processor: JsonLdProcessor, document: Any) -> "asyncio.Future[str]":
    """Run ``processor.to_rdf`` in a daemon thread.

    Returns a future settled with the conversion's result or exception. A
    conversion abandoned after a timeout keeps running on its own and holds up
    neither the event loop shutdown nor interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[str]" = loop.create_future()

    def _settle(outcome: Any, failed: bool) -> None:
        if future.done():
            return
        if failed:
            future.set_exception(outcome)
        else:
            future.set_result(outcome)

    def _convert() -> None:
        try:
            outcome, failed = processor.to_rdf(document), False
        except Exception as e:  # noqa: BLE001 - handed to the awaiting coroutine
            outcome, failed = e, True
        try:
            loop.call_soon_threadsafe(_settle, outcome, failed)
        except RuntimeError:
            logger.debug("JSON-LD conversion finished after its event loop closed")

    threading.Thread(target=_convert, name="jsonld-to-rdf", daemon=True).start()
    return future


async def validate_jsonld(
    thing: Thing,
    processor: JsonLdProcessor,
    timeout: Optional[float] = None,
    slots: Optional[asyncio.Semaphore] = None,
) -> bool:
    """Convert the parsed document to RDF and record the outcome.

    Args:
        thing: Thing that passed schema validation.
        processor: Engine that performs the conversion.
        timeout: Seconds to wait for the conversion; None waits indefinitely.
        slots: Limits how many conversions run at once. Waiting for a slot
            does not count against the timeout.

    Returns:
        True if the conversion succeeded, False otherwise. On failure the
        jsonld stage is Invalid with the engine's error as the message.
    """
    async with slots if slots is not None else contextlib.nullcontext():
        start = time.perf_counter()
        try:
            await asyncio.wait_for(_start_conversion(processor, thing.parsed), timeout)
        except asyncio.TimeoutError as e:
            if timeout is None:
                error = SemanticError(_describe(e))
            else:
                error = SemanticError(f"JSON-LD processing timed out after {timeout:g}s")
        except Exception as e:  # noqa: BLE001 - any engine failure invalidates the document
            error = SemanticError(_describe(e))
        else:
            thing.record(StageName.JSONLD, StageResult(StageStatus.VALID, elapsed_ms(start)))
            return True

    logger.error("Error validating JSON-LD file in %s: %s", thing.title, error)
    thing.record(
        StageName.JSONLD,
        StageResult(StageStatus.INVALID, elapsed_ms(start), str(error)),
    )
    return False


def _describe(e: Exception) -> str:
    message = str(e) or type(e).__name__
    # PyLD wraps the root cause; surface it so remote context failures are readable
    cause = getattr(e, "cause", None)
    if cause is not None and str(cause) not in message:
        message = f"{message} Cause: {cause}"
    return message
